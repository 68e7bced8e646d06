# corekv

Core data structures for a log-structured key-value store, in pure Python
with no third-party dependencies.

## What is inside

- `corekv.codec` – `Entry`, `ValueStruct`, the value-log entry `Header`,
  `WalHeader` and WAL record encoding (`wal_codec`, `estimate_wal_codec_size`),
  varint helpers (`put_uvarint`, `decode_uvarint`, `read_uvarint`,
  `size_varint`) and `HashReader`, which keeps a running CRC-32C of what it reads.
- `corekv.value` – `ValuePtr` (`length`, `offset`, `fid`) with `encode`,
  `decode`, `less` and `is_zero`; big-endian integer helpers; and
  `is_deleted_or_expired` / `discard_entry`.
- `corekv.keys` – versioned keys: `key_with_ts`, `parse_key`, `parse_ts`,
  `same_key`, plus small byte-copy helpers.
- `corekv.files` – SSTable and value-log file naming (`file_name_sstable`,
  `vlog_file_path`, `fid`, `load_id_map`), `compare_keys`, CRC-32C checksums
  (`calculate_checksum`, `verify_checksum`), `create_synced_file` and `sync_dir`.
- `corekv.constants` – store-wide constants and `crc32c`.
- `corekv.bloom` – a LevelDB-layout bloom `Filter` built with `new_filter`
  from key hashes made by `bloom_hash`.
- `corekv.skiplist` – an arena-backed `SkipList` memtable with
  `SkipListIterator`; a `SkipList` can also be iterated directly.
- `corekv.cache` – a W-TinyLFU `Cache` (`corekv.cache.cache`) made of a window
  LRU (`corekv.cache.lru`), a segmented LRU (`corekv.cache.slru`), a bloom-filter
  doorkeeper (`corekv.cache.bloom`) and a count-min sketch (`corekv.cache.sketch`).
- `corekv.closer`, `corekv.throttle` – `Closer` and `Throttle` for coordinating
  worker threads.
- `corekv.randutil` – thread-safe random helpers and `build_entry` for random entries.
- `corekv.mmapfile` – `mmap_file`, `munmap`, `madvise`, `msync`, `mremap`.
- `corekv.errors` – `CoreKVError` and its subclasses, plus `cond_panic`,
  `log_err` and `wrap_err`.

## Install

    pip install .

For the test suite:

    pip install ".[test]"
    pytest

## Examples

Skip list:

    from corekv.codec import Entry
    from corekv.skiplist import SkipList

    memtable = SkipList(1000)
    memtable.add(Entry(b"Key1", b"Val1"))
    assert memtable.search(b"Key1").value == b"Val1"
    assert memtable.search(b"missing") is None

Bloom filter:

    from corekv.bloom import bloom_hash, new_filter

    f = new_filter([bloom_hash(b"hello"), bloom_hash(b"world")], 10)
    assert f.may_contain_key(b"hello")

Cache:

    from corekv.cache.cache import Cache

    cache = Cache(5)
    cache.set("key1", "val1")
    value, found = cache.get("key1")   # (None, False) when not cached

Versioned keys and value pointers:

    from corekv.keys import key_with_ts, parse_key, parse_ts
    from corekv.value import ValuePtr

    k = key_with_ts(b"user", 7)
    assert parse_key(k) == b"user" and parse_ts(k) == 7

    ptr = ValuePtr(length=10, offset=20, fid=1)
    assert ValuePtr.decode(ptr.encode()) == ptr

WAL records:

    from corekv.codec import Entry, wal_codec

    record = wal_codec(Entry(b"key", b"value"))  # header | key | value | CRC-32C

Errors are raised as subclasses of `corekv.errors.CoreKVError`, except where a
standard exception fits (`ValueError`, `TypeError`, `OSError`).

## What it does not do

corekv is a set of components, not a database. There is no store object that
opens a directory, writes or replays value-log files, flushes memtables to
SSTables, compacts, or runs value-log garbage collection, and there is no
command-line tool or server. The codecs, file-naming helpers and value
pointers describe those formats so that such a store can be built on top.