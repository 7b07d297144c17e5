import math
from dataclasses import dataclass
from typing import List

from .modpow import PowerTable, expo_mod


@dataclass(frozen=True)
class Chunk:
    start: int
    count: int

    @property
    def stop(self) -> int:
        return self.start + self.count


def evaluate_term(k: int, j: int, d: int, table: PowerTable = None) -> float:
    denominator = 8 * k + j
    return expo_mod(d - k, denominator, table) / denominator


def evaluate_chunk(chunk: Chunk, j: int, d: int, table: PowerTable = None) -> float:
    s = 0.0
    for k in range(chunk.start, chunk.stop):
        denominator = 8 * k + j
        s += expo_mod(d - k, denominator, table) / denominator
        s -= math.floor(s)
    return s


def partition(start: int, size: int, width: int) -> List[Chunk]:
    size = int(size)
    width = int(width)
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    if width < 1:
        raise ValueError("width must be >= 1")
    return [Chunk(start + i * size, size) for i in range(width)]
