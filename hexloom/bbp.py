import logging
import math
from itertools import islice

from .constants import ACCURACY_CEILING, DEFAULT_WINDOW, HEX_ALPHABET, MAX_WINDOW
from .modpow import PowerTable
from .series import series_sum

log = logging.getLogger(__name__)


def pi_fraction(d: int, dispatcher=None, table: PowerTable = None, order: str = "forward") -> float:
    """Fractional part of pi * 16**d, from which the hex digits after position d are read."""
    d = int(d)
    if d < 0:
        raise ValueError("d must be >= 0")
    if table is None:
        table = PowerTable(d)
    s1 = series_sum(1, d, dispatcher, table, order)
    s4 = series_sum(4, d, dispatcher, table, order)
    s5 = series_sum(5, d, dispatcher, table, order)
    s6 = series_sum(6, d, dispatcher, table, order)
    x = 4.0 * s1 - 2.0 * s4 - s5 - s6
    x -= int(x)
    if x < 0:
        x += 1.0
    # a tiny negative combination rounds up to exactly 1.0 after the shift
    if x >= 1.0:
        x -= 1.0
    return x


class HexDigits:
    """Consumes a fraction and yields its hex digits, at most `limit` of them."""

    def __init__(self, x: float, limit: int = MAX_WINDOW):
        self.x = x
        self.remaining = int(limit)

    def __iter__(self):
        return self

    def __next__(self) -> str:
        if self.remaining <= 0:
            raise StopIteration
        self.x = 16.0 * (self.x - math.floor(self.x))
        self.remaining -= 1
        return HEX_ALPHABET[int(self.x)]

    def take(self, count: int) -> str:
        return "".join(islice(self, int(count)))


def _check_count(count: int) -> int:
    count = int(count)
    if count < 1:
        raise ValueError("count must be >= 1")
    if count > MAX_WINDOW:
        raise ValueError(f"count must be <= {MAX_WINDOW}, doubles carry no more digits")
    return count


def render_hex(x: float, count: int = DEFAULT_WINDOW) -> str:
    return HexDigits(x, _check_count(count)).take(count)


def pi_hex_window(
    position: int,
    count: int = DEFAULT_WINDOW,
    dispatcher=None,
    table: PowerTable = None,
    order: str = "forward",
) -> str:
    position = int(position)
    if position < 1:
        raise ValueError("position must be >= 1")
    count = _check_count(count)
    if position > ACCURACY_CEILING:
        log.warning("position %d is past the accuracy ceiling of %d, trailing digits may be wrong", position, ACCURACY_CEILING)
    x = pi_fraction(position - 1, dispatcher, table, order)
    return render_hex(x, count)


def pi_hex_digit(n: int, dispatcher=None) -> int:
    n = int(n)
    if n < 0:
        raise ValueError("n must be >= 0")
    return HEX_ALPHABET.index(pi_hex_window(n + 1, 1, dispatcher))


def pi_hex_digits(start: int, count: int, dispatcher=None) -> str:
    start = int(start)
    count = int(count)
    if start < 0:
        raise ValueError("start must be >= 0")
    if count < 0:
        raise ValueError("count must be >= 0")
    return "".join(HEX_ALPHABET[pi_hex_digit(start + i, dispatcher)] for i in range(count))
