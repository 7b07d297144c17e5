from dataclasses import dataclass
from typing import Optional

from .constants import ORDERS, POOL_KINDS, SUBSTRATES, normalize_choice
from .dispatch import default_workers, make_dispatcher


@dataclass(frozen=True)
class EngineConfig:
    substrate: str = "cpu"
    workers: Optional[int] = None
    chunk_size: Optional[int] = None
    kind: Optional[str] = None
    order: str = "forward"

    def validate(self) -> "EngineConfig":
        substrate = normalize_choice(self.substrate, SUBSTRATES, "substrate")
        order = normalize_choice(self.order, ORDERS, "reduction order")
        kind = None if self.kind is None else normalize_choice(self.kind, POOL_KINDS, "pool kind")
        if self.workers is not None and int(self.workers) < 1:
            raise ValueError("workers must be >= 1")
        if self.chunk_size is not None and int(self.chunk_size) < 1:
            raise ValueError("chunk_size must be >= 1")
        return EngineConfig(substrate, self.workers, self.chunk_size, kind, order)

    @property
    def resolved_workers(self) -> int:
        if self.substrate == "serial":
            return 1
        return default_workers() if self.workers is None else int(self.workers)

    def dispatcher(self):
        cfg = self.validate()
        return make_dispatcher(cfg.substrate, cfg.workers, cfg.chunk_size, cfg.kind)
