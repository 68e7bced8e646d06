import io

import pytest

from corekv.codec import (
    Entry,
    HashReader,
    Header,
    ValueStruct,
    WalHeader,
    decode_uvarint,
    estimate_wal_codec_size,
    put_uvarint,
    read_uvarint,
    size_varint,
    wal_codec,
)
from corekv.constants import crc32c
from corekv.value import bytes_to_u32


def test_value_struct_round_trip():
    v = ValueStruct(value="硬核课堂".encode(), meta=2, expires_at=213123123123)
    data = v.encode_value()
    assert len(data) == v.encoded_size()
    assert ValueStruct.decode_value(data) == v


def test_put_uvarint_wire_bytes():
    assert put_uvarint(300) == b"\xac\x02"
    assert put_uvarint(0) == b"\x00"


def test_size_varint_boundaries():
    assert size_varint(0) == 1
    assert size_varint(127) == 1
    assert size_varint(128) == 2
    assert size_varint(2**64 - 1) == 10


@pytest.mark.parametrize("value", [0, 1, 127, 128, 300, 2**32, 2**64 - 1])
def test_uvarint_round_trip(value):
    encoded = put_uvarint(value)
    assert decode_uvarint(encoded + b"tail") == (value, len(encoded))
    assert read_uvarint(io.BytesIO(encoded)) == value


def test_put_uvarint_rejects_out_of_range():
    with pytest.raises(ValueError):
        put_uvarint(-1)
    with pytest.raises(ValueError):
        put_uvarint(2**64)


def test_decode_uvarint_truncated_and_overflow():
    with pytest.raises(ValueError):
        decode_uvarint(b"\x80\x80")
    with pytest.raises(ValueError):
        decode_uvarint(b"\xff" * 10 + b"\x01")


def test_read_uvarint_eof():
    with pytest.raises(EOFError):
        read_uvarint(io.BytesIO(b""))
    with pytest.raises(EOFError):
        read_uvarint(io.BytesIO(b"\x80"))


def test_entry_sizes():
    e = Entry(key=b"key", value=b"abc")
    assert e.encoded_size() == len(b"abc") + size_varint(0) + size_varint(0)
    assert e.estimate_size(10) == len(b"key") + len(b"abc") + 1
    assert e.estimate_size(3) == len(b"key") + 12 + 1


def test_entry_is_zero_and_log_fields():
    assert Entry().is_zero()
    e = Entry(key=b"k", offset=17, hlen=5)
    assert not e.is_zero()
    assert e.log_offset() == 17
    assert e.log_header_len() == 5


def test_entry_with_ttl_sets_future_expiry():
    import time

    before = int(time.time())
    e = Entry(key=b"k").with_ttl(60)
    assert before + 59 <= e.expires_at <= int(time.time()) + 60


def test_header_round_trip():
    h = Header(klen=9, vlen=1000, expires_at=123456789, meta=2)
    data = h.encode()
    decoded, n = Header.decode(data + b"extra")
    assert decoded == h
    assert n == len(data)


def test_header_decode_from_hash_reader():
    h = Header(klen=3, vlen=4, expires_at=77, meta=1)
    data = h.encode()
    reader = HashReader(io.BytesIO(data + b"keyval"))
    decoded, n = Header.decode_from(reader)
    assert decoded == h
    assert n == len(data)
    assert reader.sum32() == crc32c(data)


def test_hash_reader_tracks_bytes_and_crc():
    reader = HashReader(io.BytesIO(b"abc"))
    assert reader.read(2) == b"ab"
    assert reader.bytes_read == 2
    assert reader.read_byte() == ord("c")
    assert reader.sum32() == crc32c(b"abc")
    with pytest.raises(EOFError):
        reader.read_byte()


def test_wal_header_round_trip():
    h = WalHeader(key_len=5, value_len=70000, meta=3, expires_at=2**40)
    data = h.encode()
    decoded, n = WalHeader.decode(HashReader(io.BytesIO(data)))
    assert decoded == h
    assert n == len(data)


def test_wal_codec_record_layout():
    e = Entry(key=b"key", value=b"value", expires_at=42, meta=3)
    enc = wal_codec(e)
    reader = HashReader(io.BytesIO(enc))
    header, _ = WalHeader.decode(reader)
    assert (header.key_len, header.value_len, header.meta, header.expires_at) == (3, 5, 0, 42)
    assert reader.read(header.key_len) == b"key"
    assert reader.read(header.value_len) == b"value"
    assert bytes_to_u32(enc[-4:]) == reader.sum32()
    assert reader.bytes_read == len(enc) - 4
    assert len(enc) <= estimate_wal_codec_size(e)