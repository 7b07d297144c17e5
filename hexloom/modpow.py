import bisect
import math
import threading
from typing import Tuple


class PowerTable:
    """Append-only table of the powers of two 1, 2, 4, ... used by expo_mod.

    The table only grows. Growth swaps in a new tuple under a lock, so readers
    always see a complete table and may read it from any number of workers.
    """

    def __init__(self, n: float = 1):
        self._lock = threading.Lock()
        self._powers: Tuple[int, ...] = (1,)
        self.ensure(n)

    @property
    def powers(self) -> Tuple[int, ...]:
        return self._powers

    def ensure(self, n: float) -> None:
        if self._powers[-1] >= n:
            return
        with self._lock:
            powers = list(self._powers)
            while powers[-1] < n:
                powers.append(powers[-1] * 2)
            self._powers = tuple(powers)

    def largest_at_most(self, n: float) -> Tuple[int, int]:
        powers = self._powers
        if n < 1:
            raise ValueError("n must be >= 1")
        if powers[-1] < n:
            raise ValueError(f"table tops out at {powers[-1]}, cannot cover {n}")
        i = bisect.bisect_right(powers, n) - 1
        return i, powers[i]

    def __len__(self) -> int:
        return len(self._powers)

    def __getstate__(self):
        return {"powers": self._powers}

    def __setstate__(self, state):
        self._lock = threading.Lock()
        self._powers = tuple(state["powers"])


DEFAULT_TABLE = PowerTable()


def expo_mod(n: float, k: float, table: PowerTable = None) -> float:
    """16**n mod k by left-to-right binary exponentiation in doubles.

    Every intermediate is reduced mod k, so the result is exact while k*k
    stays below 2**53.
    """
    if table is None:
        table = DEFAULT_TABLE
    n = float(n)
    k = float(k)
    if n < 1:
        return math.fmod(1.0, k)
    table.ensure(n)
    bits, t = table.largest_at_most(n)
    r = 1.0
    for _ in range(bits + 1):
        if n >= t:
            r = math.fmod(r * 16.0, k)
            n -= t
        t //= 2
        if t >= 1:
            r = math.fmod(r * r, k)
    return r
