import pytest

from corekv.bloom import Filter, bloom_bits_per_key, bloom_hash, new_filter


def _bits(f):
    return "".join("1" if (byte >> j) & 1 else "." for byte in f for j in range(8))


def _le32(i):
    return (i & 0xFFFFFFFF).to_bytes(4, "little")


def _next_length(x):
    if x < 10:
        return x + 1
    if x < 100:
        return x + 10
    if x < 1000:
        return x + 100
    return x + 1000


def test_small_bloom_filter():
    f = new_filter([bloom_hash(b"hello"), bloom_hash(b"world")], 10)
    want = "1...1.........1.........1.....1...1...1.....1.........1.....1....11....."
    assert _bits(f) == want

    expected = {"hello": True, "world": True, "x": False, "foo": False}
    for key, present in expected.items():
        assert f.may_contain_key(key.encode()) is present


def test_bloom_filter_false_positive_rate():
    mediocre, good = 0, 0
    length = 1
    while length <= 10000:
        keys = [_le32(i) for i in range(length)]
        f = new_filter((bloom_hash(k) for k in keys), 10)

        assert len(f) <= (length * 10 // 8) + 40

        assert all(f.may_contain_key(k) for k in keys)

        false_positives = sum(1 for i in range(10000) if f.may_contain_key(_le32(10**9 + i)))
        assert false_positives <= 0.02 * 10000
        if false_positives > 0.0125 * 10000:
            mediocre += 1
        else:
            good += 1
        length = _next_length(length)

    assert mediocre <= good // 5


@pytest.mark.parametrize(
    "text, want",
    [
        ("", 0xBC9F1D34),
        ("g", 0xD04A8BDA),
        ("go", 0x3E0B0745),
        ("gop", 0x0C326610),
        ("goph", 0x8C9D6390),
        ("gophe", 0x9BFD4B0A),
        ("gopher", 0xA78EDC7C),
        ("I had a dream it would end this way.", 0xE14A9DB9),
    ],
)
def test_hash(text, want):
    assert bloom_hash(text.encode()) == want


def test_tiny_filter_contains_nothing():
    assert Filter(b"").may_contain_key(b"anything") is False
    assert Filter(b"\x01").may_contain(12345) is False


def test_reserved_k_matches_everything():
    assert Filter(bytes([0, 31])).may_contain_key(b"whatever") is True


def test_filter_records_k_in_last_byte():
    f = new_filter([bloom_hash(b"a")], 10)
    assert f[-1] == 6
    assert len(f) == 9


def test_bits_per_key_for_one_percent():
    assert bloom_bits_per_key(1000, 0.01) == 10