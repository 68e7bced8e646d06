import random

import pytest

from corekv.cache.sketch import CmSketch, next_2_power


def test_next_2_power_invariants():
    for x in range(1, 1025):
        p = next_2_power(x)
        assert p & (p - 1) == 0
        assert x <= p < 2 * x


def test_next_2_power_of_zero():
    assert next_2_power(0) == 0


def test_fresh_sketch_estimates_zero():
    sketch = CmSketch(64, rng=random.Random(1))
    assert sketch.estimate(12345) == 0


def test_never_underestimates():
    sketch = CmSketch(64, rng=random.Random(2))
    for key in range(5):
        for _ in range(key + 1):
            sketch.increment(key)
    for key in range(5):
        assert sketch.estimate(key) >= key + 1


def test_counters_saturate():
    sketch = CmSketch(16, rng=random.Random(3))
    for _ in range(40):
        sketch.increment(99)
    assert sketch.estimate(99) == 15


def test_reset_halves():
    sketch = CmSketch(32, rng=random.Random(4))
    for _ in range(11):
        sketch.increment(7)
    before = sketch.estimate(7)
    sketch.reset()
    assert sketch.estimate(7) == before // 2


def test_clear_zeroes():
    sketch = CmSketch(32, rng=random.Random(5))
    for key in range(20):
        sketch.increment(key)
    sketch.clear()
    assert all(sketch.estimate(key) == 0 for key in range(20))


def test_single_counter_sketch_works():
    sketch = CmSketch(1, rng=random.Random(6))
    sketch.increment(3)
    assert sketch.estimate(3) >= 1


def test_invalid_counters():
    with pytest.raises(ValueError):
        CmSketch(0)