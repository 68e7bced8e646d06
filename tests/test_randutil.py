import time

import pytest

from corekv.randutil import (
    ALPHABET,
    build_entry,
    int63n,
    rand_float,
    rand_n,
    rand_str,
)


def test_int63n_in_range():
    values = [int63n(10) for _ in range(500)]
    assert all(0 <= v < 10 for v in values)
    assert len(set(values)) > 1


def test_rand_n_in_range():
    values = [rand_n(3) for _ in range(300)]
    assert set(values) <= {0, 1, 2}
    assert len(set(values)) > 1


@pytest.mark.parametrize("func", [int63n, rand_n])
@pytest.mark.parametrize("n", [0, -5])
def test_non_positive_bound_rejected(func, n):
    with pytest.raises(ValueError):
        func(n)


def test_rand_float_in_unit_interval():
    values = [rand_float() for _ in range(200)]
    assert all(0.0 <= v < 1.0 for v in values)


def test_rand_str_length_and_alphabet():
    text = rand_str(200)
    assert len(text) == 200
    assert set(text) <= set(ALPHABET)


def test_rand_str_empty():
    assert rand_str(0) == ""


def test_build_entry_shape():
    before = int(time.time() * 1000)
    entry = build_entry()
    after = int(time.time() * 1000)
    twelve_hours_ms = 12 * 3600 * 1000

    assert entry.key.endswith(b"12345678")
    assert len(entry.key.decode("utf-8")) == 16 + len("12345678")
    assert len(entry.value.decode("utf-8")) == 128
    assert before + twelve_hours_ms <= entry.expires_at <= after + twelve_hours_ms