import logging
import math
from dataclasses import dataclass
from typing import Optional

from .chunks import evaluate_term, partition
from .constants import ORDERS, TAIL_EXTRA, TAIL_THRESHOLD, normalize_choice
from .dispatch import SerialDispatcher, fold
from .modpow import DEFAULT_TABLE, PowerTable

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tail:
    value: float
    terms: int
    dropped: Optional[float]


def left_portion(j: int, d: int, dispatcher=None, table: PowerTable = None, order: str = "forward") -> float:
    """Fractional part of sum_{k<d} (16**(d-k) mod (8k+j)) / (8k+j).

    Full rounds go through the dispatcher, one chunk per worker. Whatever is
    left once a round no longer fits below d is summed term by term here.
    """
    if table is None:
        table = DEFAULT_TABLE
    if dispatcher is None:
        dispatcher = SerialDispatcher()
    order = normalize_choice(order, ORDERS, "reduction order")
    table.ensure(d)
    size = dispatcher.chunk_size
    width = dispatcher.width
    span = size * width
    s = 0.0
    k = 0
    rounds = 0
    while k + span < d:
        results = dispatcher.run(partition(k, size, width), j, d, table)
        s = fold(s, results, order)
        k += span
        rounds += 1
    remainder = d - k
    while k < d:
        s += evaluate_term(k, j, d, table)
        s -= math.floor(s)
        k += 1
    log.debug("S%d(%d) left: %d rounds of %d terms, %d sequential", j, d, rounds, span, remainder)
    return s


def right_portion(j: int, d: int, threshold: float = TAIL_THRESHOLD, extra: int = TAIL_EXTRA) -> Tail:
    s = 0.0
    terms = 0
    dropped = None
    for k in range(d, d + extra + 1):
        term = 16.0 ** (d - k) / (8 * k + j)
        if term < threshold:
            dropped = term
            break
        s += term
        s -= math.floor(s)
        terms += 1
    if dropped is None:
        log.warning("S%d(%d) tail hit its %d term bound", j, d, extra + 1)
    else:
        log.debug("S%d(%d) tail: %d terms, dropped %.3g", j, d, terms, dropped)
    return Tail(s, terms, dropped)


def series_sum(j: int, d: int, dispatcher=None, table: PowerTable = None, order: str = "forward") -> float:
    d = int(d)
    if d < 0:
        raise ValueError("d must be >= 0")
    s = left_portion(j, d, dispatcher, table, order) + right_portion(j, d).value
    return s - math.floor(s)
