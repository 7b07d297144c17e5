import math

from mpmath import mp

from .constants import HEX_ALPHABET


def _prec_bits(d: int, count: int) -> int:
    return max(128, int(math.log2(d + 1)) + 4 * int(count) + 96)


def _series_fraction(j: int, d: int, prec: int):
    s = mp.mpf(0)
    for k in range(d):
        r = 8 * k + j
        s += mp.mpf(pow(16, d - k, r)) / r
        s -= mp.floor(s)
    eps = mp.mpf(2) ** (-prec)
    power = mp.mpf(1)
    k = d
    while True:
        term = power / (8 * k + j)
        if term < eps:
            break
        s += term
        power /= 16
        k += 1
    return s - mp.floor(s)


def reference_fraction(d: int, count: int = 16):
    """Fractional part of pi * 16**d with enough working bits for `count` digits."""
    d = int(d)
    if d < 0:
        raise ValueError("d must be >= 0")
    with mp.workprec(_prec_bits(d, count)):
        x = (
            4 * _series_fraction(1, d, mp.prec)
            - 2 * _series_fraction(4, d, mp.prec)
            - _series_fraction(5, d, mp.prec)
            - _series_fraction(6, d, mp.prec)
        )
        return +(x - mp.floor(x))


def reference_hex_digits(start: int, count: int) -> str:
    start = int(start)
    count = int(count)
    if start < 0:
        raise ValueError("start must be >= 0")
    if count < 0:
        raise ValueError("count must be >= 0")
    if count == 0:
        return ""
    with mp.workprec(_prec_bits(start, count)):
        f = reference_fraction(start, count)
        out = []
        for _ in range(count):
            f *= 16
            digit = int(mp.floor(f))
            out.append(HEX_ALPHABET[digit])
            f -= digit
    return "".join(out)


def reference_expo_mod(n: int, k: int) -> int:
    return pow(16, int(n), int(k))
