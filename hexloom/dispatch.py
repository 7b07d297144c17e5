import logging
import math
import os
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from itertools import repeat
from typing import Dict, List, Sequence

from .chunks import Chunk, evaluate_chunk
from .constants import (
    CPU_CHUNK_SIZE,
    GRID_BLOCKS,
    GRID_LANE_TERMS,
    GRID_THREADS_PER_BLOCK,
    ORDERS,
    POOL_KINDS,
    SUBSTRATES,
    normalize_choice,
)
from .modpow import PowerTable

log = logging.getLogger(__name__)


class DispatchError(RuntimeError):
    def __init__(self, message: str, workers: int, buffer_size: int):
        super().__init__(f"{message} (workers={workers}, buffer_size={buffer_size})")
        self.workers = workers
        self.buffer_size = buffer_size


def default_workers() -> int:
    return os.cpu_count() or 1


def fold(s: float, results: Sequence[float], order: str = "forward") -> float:
    """Fold partial results into s, keeping only the fractional part after each add."""
    order = normalize_choice(order, ORDERS, "reduction order")
    seq = results if order == "forward" else reversed(results)
    for r in seq:
        s += r
        s -= math.floor(s)
    return s


def _make_executor(kind: str, workers: int) -> Executor:
    if kind == "process":
        return ProcessPoolExecutor(max_workers=workers)
    return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hexloom")


class SerialDispatcher:
    width = 1

    def __init__(self, chunk_size: int = CPU_CHUNK_SIZE):
        if int(chunk_size) < 1:
            raise ValueError("chunk_size must be >= 1")
        self.chunk_size = int(chunk_size)
        self.workers = 1

    def run(self, chunks: Sequence[Chunk], j: int, d: int, table: PowerTable) -> List[float]:
        return [evaluate_chunk(c, j, d, table) for c in chunks]

    def device_info(self) -> Dict:
        return {"name": "serial", "workers": 1, "chunk_size": self.chunk_size}

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class PoolDispatcher:
    def __init__(self, workers: int = None, chunk_size: int = CPU_CHUNK_SIZE, kind: str = "process"):
        workers = default_workers() if workers is None else int(workers)
        if workers < 1:
            raise ValueError("workers must be >= 1")
        if int(chunk_size) < 1:
            raise ValueError("chunk_size must be >= 1")
        self.kind = normalize_choice(kind, POOL_KINDS, "pool kind")
        self.workers = workers
        self.chunk_size = int(chunk_size)
        try:
            self.executor = _make_executor(self.kind, workers)
        except (OSError, ValueError) as exc:
            raise DispatchError(f"cannot create {self.kind} pool", workers, 0) from exc

    @property
    def width(self) -> int:
        return self.workers

    def run(self, chunks: Sequence[Chunk], j: int, d: int, table: PowerTable) -> List[float]:
        try:
            return list(self.executor.map(evaluate_chunk, chunks, repeat(j), repeat(d), repeat(table)))
        except (OSError, RuntimeError) as exc:
            raise DispatchError(f"{self.kind} pool failed to run chunks", self.workers, len(chunks)) from exc

    def device_info(self) -> Dict:
        return {
            "name": f"cpu-{self.kind}-pool",
            "workers": self.workers,
            "chunk_size": self.chunk_size,
        }

    def close(self):
        if self.executor is not None:
            self.executor.shutdown(wait=True)
            self.executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def _allocate_buffer(size: int) -> List[float]:
    return [0.0] * size


def _run_lanes(k0: int, first: int, count: int, lane_terms: int, j: int, d: int, table: PowerTable) -> List[float]:
    out = []
    for lane in range(first, first + count):
        out.append(evaluate_chunk(Chunk(k0 + lane * lane_terms, lane_terms), j, d, table))
    return out


class GridDispatcher:
    """Lane-grid substrate shaped like a GPU kernel launch.

    One round launches blocks * threads_per_block lanes. Lane i evaluates the
    lane_terms terms starting at k0 + i * lane_terms and writes slot i of the
    result buffer. The pool behind the grid runs the lanes in contiguous
    batches, one batch per worker, and the launch returns once every lane
    has written its slot.
    """

    def __init__(
        self,
        blocks: int = GRID_BLOCKS,
        threads_per_block: int = GRID_THREADS_PER_BLOCK,
        lane_terms: int = GRID_LANE_TERMS,
        workers: int = None,
        kind: str = "process",
    ):
        if int(blocks) < 1 or int(threads_per_block) < 1:
            raise ValueError("grid dimensions must be >= 1")
        if int(lane_terms) < 1:
            raise ValueError("lane_terms must be >= 1")
        self.blocks = int(blocks)
        self.threads_per_block = int(threads_per_block)
        self.chunk_size = int(lane_terms)
        self.lanes = self.blocks * self.threads_per_block
        self.pool = PoolDispatcher(
            workers=min(default_workers() if workers is None else int(workers), self.lanes),
            chunk_size=self.chunk_size,
            kind=kind,
        )
        try:
            self.buffer = _allocate_buffer(self.lanes)
        except MemoryError as exc:
            self.pool.close()
            raise DispatchError("cannot allocate lane result buffer", self.pool.workers, self.lanes) from exc

    @property
    def width(self) -> int:
        return self.lanes

    @property
    def workers(self) -> int:
        return self.pool.workers

    def launch(self, k0: int, j: int, d: int, table: PowerTable) -> List[float]:
        per = -(-self.lanes // self.pool.workers)
        batches = [(first, min(per, self.lanes - first)) for first in range(0, self.lanes, per)]
        executor = self.pool.executor
        try:
            futures = [
                executor.submit(_run_lanes, k0, first, count, self.chunk_size, j, d, table)
                for first, count in batches
            ]
            for (first, count), fut in zip(batches, futures):
                self.buffer[first : first + count] = fut.result()
        except (OSError, RuntimeError) as exc:
            raise DispatchError("grid launch failed", self.pool.workers, self.lanes) from exc
        log.debug("grid launch k0=%d lanes=%d batches=%d", k0, self.lanes, len(batches))
        return list(self.buffer)

    def run(self, chunks: Sequence[Chunk], j: int, d: int, table: PowerTable) -> List[float]:
        if len(chunks) != self.lanes:
            raise ValueError(f"grid expects {self.lanes} chunks, got {len(chunks)}")
        if any(c.count != self.chunk_size for c in chunks):
            raise ValueError("grid chunks must all span lane_terms terms")
        for i, c in enumerate(chunks):
            if c.start != chunks[0].start + i * self.chunk_size:
                raise ValueError("grid chunks must be contiguous")
        return self.launch(chunks[0].start, j, d, table)

    def device_info(self) -> Dict:
        return {
            "name": f"{self.pool.kind}-lane-grid",
            "blocks": self.blocks,
            "threads_per_block": self.threads_per_block,
            "lanes": self.lanes,
            "lane_terms": self.chunk_size,
            "workers": self.pool.workers,
        }

    def close(self):
        self.pool.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def make_dispatcher(substrate: str = "cpu", workers: int = None, chunk_size: int = None, kind: str = None):
    substrate = normalize_choice(substrate, SUBSTRATES, "substrate")
    if substrate == "serial":
        return SerialDispatcher(CPU_CHUNK_SIZE if chunk_size is None else chunk_size)
    if substrate == "grid":
        return GridDispatcher(
            lane_terms=GRID_LANE_TERMS if chunk_size is None else chunk_size,
            workers=workers,
            kind=kind or "process",
        )
    return PoolDispatcher(workers=workers, chunk_size=CPU_CHUNK_SIZE if chunk_size is None else chunk_size, kind=kind or "process")
