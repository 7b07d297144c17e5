import pytest

from hexloom.reference import reference_expo_mod, reference_fraction, reference_hex_digits
from hexloom.verify import verify_window


def test_reference_prefix():
    assert reference_hex_digits(0, 16) == "243F6A8885A308D3"


def test_reference_windows_overlap():
    long = reference_hex_digits(0, 32)
    assert reference_hex_digits(10, 12) == long[10:22]


def test_reference_fraction():
    assert int(16 * reference_fraction(0)) == 2


def test_reference_edges():
    assert reference_hex_digits(5, 0) == ""
    assert reference_expo_mod(3, 7) == 4096 % 7
    with pytest.raises(ValueError):
        reference_hex_digits(-1, 3)


def test_verify_window():
    assert verify_window(1, "243F6A888") == (True, "exact")
    assert verify_window(1, "243f6a889") == (True, "last-digit")
    assert verify_window(1, "243F6B888") == (False, "mismatch")
    assert verify_window(1, "243F0000", samples=4) == (True, "exact")
    assert verify_window(3, "") == (True, "verification skipped")
    with pytest.raises(ValueError):
        verify_window(0, "2")
