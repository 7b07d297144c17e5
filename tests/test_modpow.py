import pickle
import threading

import pytest

from hexloom.modpow import PowerTable, expo_mod
from hexloom.reference import reference_expo_mod


MODULI = (1, 2, 3, 7, 9, 15, 16, 17, 97, 1001, 65537, 999983, 1000000)


def test_expo_mod_matches_integer_pow():
    table = PowerTable()
    for n in range(21):
        for k in MODULI:
            assert expo_mod(n, k, table) == reference_expo_mod(n, k), (n, k)


def test_expo_mod_large_exponent():
    table = PowerTable()
    for n, k in [(999_999, 9), (1_000_000, 8_000_001), (123_457, 987_653), (2**20, 8 * 2**20 + 5)]:
        assert expo_mod(n, k, table) == reference_expo_mod(n, k)


def test_expo_mod_zero_exponent():
    assert expo_mod(0, 9) == 1.0
    assert expo_mod(0, 1) == 0.0


def test_table_grows_to_smallest_cover():
    table = PowerTable(1000)
    assert table.powers[-1] == 1024
    table.ensure(5)
    assert table.powers[-1] == 1024
    table.ensure(1025)
    assert table.powers[-1] == 2048
    assert table.powers[:4] == (1, 2, 4, 8)


def test_largest_at_most():
    table = PowerTable(1024)
    assert table.largest_at_most(1000) == (9, 512)
    assert table.largest_at_most(1024) == (10, 1024)
    assert table.largest_at_most(1) == (0, 1)
    with pytest.raises(ValueError):
        table.largest_at_most(5000)
    with pytest.raises(ValueError):
        table.largest_at_most(0)


def test_table_pickles_without_lock():
    table = PowerTable(300)
    clone = pickle.loads(pickle.dumps(table))
    assert clone.powers == table.powers
    clone.ensure(10_000)
    assert clone.powers[-1] == 16384
    assert table.powers[-1] == 512


def test_concurrent_growth_is_consistent():
    table = PowerTable()
    targets = [2**i + 1 for i in range(20)] * 4
    threads = [threading.Thread(target=table.ensure, args=(n,)) for n in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert table.powers == tuple(2**i for i in range(21))
