import pytest

from corekv.cache.bloom import BloomFilter, bloom_bits_per_key, bloom_hash, new_filter


def test_inserted_keys_are_found():
    f = new_filter(100, 0.01)
    keys = [f"key{i}".encode() for i in range(100)]
    for key in keys:
        assert f.insert_key(key) is True
    assert all(f.may_contain_key(key) for key in keys)


def test_empty_filter_contains_nothing():
    f = new_filter(100, 0.01)
    assert not any(f.may_contain_key(f"key{i}".encode()) for i in range(50))


def test_k_byte_stored_at_end():
    f = new_filter(1000, 0.01)
    assert f.bitmap[-1] == f.k
    assert 1 <= f.k <= 30


def test_allow_key_reports_previous_presence():
    f = new_filter(10, 0.01)
    assert f.allow_key(b"hello") is False
    assert f.allow_key(b"hello") is True


def test_allow_matches_allow_key():
    f = new_filter(10, 0.01)
    h = bloom_hash(b"world")
    assert f.allow(h) is False
    assert f.may_contain_key(b"world") is True


def test_reset_clears_bits():
    f = new_filter(10, 0.01)
    f.insert_key(b"hello")
    f.reset()
    assert f.may_contain_key(b"hello") is False
    assert not any(f.bitmap)


def test_short_bitmap_contains_nothing():
    assert BloomFilter(bytearray(1), 1).may_contain(12345) is False


def test_large_k_matches_everything():
    f = BloomFilter(bytearray(10), 31)
    assert f.may_contain(42) is True
    assert f.insert(42) is True


def test_hash_values_from_reference():
    assert bloom_hash(b"") == 0xBC9F1D34
    assert bloom_hash(b"g") == 0xD04A8BDA
    assert bloom_hash(b"gopher") == 0xA78EDC7C


def test_bits_per_key_grows_as_rate_shrinks():
    assert bloom_bits_per_key(100, 0.001) > bloom_bits_per_key(100, 0.01)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        new_filter(0, 0.01)
    with pytest.raises(ValueError):
        new_filter(10, 1.5)