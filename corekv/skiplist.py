"""An arena-backed skip list used as the in-memory table, with its iterator."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator as _PyIterator
from dataclasses import dataclass

from corekv.codec import Entry, ValueStruct
from corekv.errors import CoreKVError
from corekv.randutil import rand_n

DEFAULT_MAX_LEVEL = 20

# Size of a full-height node record: score, value ref, key offset/size, height, levels.
MAX_NODE_SIZE = 8 + 8 + 4 + 2 + 2 + 4 * DEFAULT_MAX_LEVEL
_OFFSET_SIZE = 4
_NODE_ALIGN = 7


@dataclass
class IteratorOptions:
    """Options for iterators: a key prefix and the direction."""

    prefix: bytes = b""
    is_asc: bool = True


class Iterator(ABC):
    """Cursor over key-ordered entries."""

    @abstractmethod
    def next(self) -> None: ...

    @abstractmethod
    def valid(self) -> bool: ...

    @abstractmethod
    def rewind(self) -> None: ...

    @abstractmethod
    def item(self) -> Entry: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def seek(self, key: bytes) -> None: ...


class Arena:
    """Append-only byte region holding keys and encoded values."""

    def __init__(self, size: int) -> None:
        self._n = 1
        self._buf = bytearray(size)
        self._lock = threading.Lock()

    def allocate(self, sz: int) -> int:
        """Reserve ``sz`` bytes and return their offset, growing the buffer as needed."""
        with self._lock:
            self._n += sz
            offset = self._n
            if offset > len(self._buf) - MAX_NODE_SIZE:
                grow_by = max(min(len(self._buf), 1 << 30), sz)
                self._buf.extend(bytes(grow_by))
                if offset > len(self._buf):
                    self._buf.extend(bytes(offset - len(self._buf)))
            return offset - sz

    def put_node(self, height: int) -> int:
        """Reserve room for a node of ``height`` levels; return its aligned offset."""
        unused = (DEFAULT_MAX_LEVEL - height) * _OFFSET_SIZE
        n = self.allocate(MAX_NODE_SIZE - unused + _NODE_ALIGN)
        return (n + _NODE_ALIGN) & ~_NODE_ALIGN

    def put_key(self, key: bytes) -> int:
        offset = self.allocate(len(key))
        self._buf[offset:offset + len(key)] = key
        return offset

    def put_val(self, v: ValueStruct) -> int:
        data = v.encode_value()
        offset = self.allocate(len(data))
        self._buf[offset:offset + len(data)] = data
        return offset

    def get_key(self, offset: int, size: int) -> bytes:
        return bytes(self._buf[offset:offset + size])

    def get_val(self, offset: int, size: int) -> ValueStruct:
        return ValueStruct.decode_value(bytes(self._buf[offset:offset + size]))

    def size(self) -> int:
        """Bytes allocated so far."""
        return self._n


class _Element:
    __slots__ = ("offset", "score", "key_offset", "key_size", "value_ref", "levels")

    def __init__(self, offset: int, score: float, key_offset: int, key_size: int,
                 value_ref: tuple[int, int], height: int) -> None:
        self.offset = offset
        self.score = score
        self.key_offset = key_offset
        self.key_size = key_size
        self.value_ref = value_ref
        self.levels: list[_Element | None] = [None] * height


def _calc_score(key: bytes) -> float:
    return float(int.from_bytes(bytes(key[:8]).ljust(8, b"\0"), "big"))


class SkipList:
    """Sorted key/value map kept in an arena; safe for concurrent use."""

    def __init__(self, arena_size: int, max_level: int = DEFAULT_MAX_LEVEL) -> None:
        self._arena = Arena(arena_size)
        self._lock = threading.RLock()
        self._max_level = min(max(max_level, 1), DEFAULT_MAX_LEVEL)
        self._height = 1
        self._closed = False
        self._head = self._new_element(b"", ValueStruct(), DEFAULT_MAX_LEVEL)

    def _put_value(self, value: ValueStruct) -> tuple[int, int]:
        return self._arena.put_val(value), value.encoded_size()

    def _new_element(self, key: bytes, value: ValueStruct, height: int) -> _Element:
        node_offset = self._arena.put_node(height)
        key_offset = self._arena.put_key(key)
        return _Element(node_offset, _calc_score(key), key_offset, len(key),
                        self._put_value(value), height)

    def _key_of(self, elem: _Element) -> bytes:
        return self._arena.get_key(elem.key_offset, elem.key_size)

    def _compare(self, score: float, key: bytes, elem: _Element) -> int:
        if score == elem.score:
            other = self._key_of(elem)
            return (key > other) - (key < other)
        return -1 if score < elem.score else 1

    def _find(self, key: bytes) -> tuple[list[_Element], _Element | None]:
        """Return the last node before ``key`` on each level, and the node holding it."""
        score = _calc_score(key)
        path = [self._head] * DEFAULT_MAX_LEVEL
        prev = self._head
        for level in reversed(range(self._height)):
            nxt = prev.levels[level]
            while nxt is not None:
                cmp = self._compare(score, key, nxt)
                if cmp == 0:
                    return path, nxt
                if cmp < 0:
                    break
                prev = nxt
                nxt = prev.levels[level]
            path[level] = prev
        return path, None

    def _rand_level(self) -> int:
        for level in range(1, self._max_level):
            if rand_n(1000) % 2 == 0:
                return level
        return self._max_level

    def size(self) -> int:
        """Bytes used in the arena."""
        return self._arena.size()

    def add(self, entry: Entry) -> None:
        """Insert ``entry`` or replace the value of an existing key."""
        key = bytes(entry.key)
        value = ValueStruct(meta=entry.meta, value=bytes(entry.value),
                            expires_at=entry.expires_at)
        with self._lock:
            if self._closed:
                raise CoreKVError("skip list is closed")
            path, found = self._find(key)
            if found is not None:
                found.value_ref = self._put_value(value)
                return
            level = self._rand_level()
            self._height = max(self._height, level)
            elem = self._new_element(key, value, level)
            for i, prev in enumerate(path[:level]):
                elem.levels[i] = prev.levels[i]
                prev.levels[i] = elem

    def _entry_of(self, elem: _Element, key: bytes) -> Entry:
        vs = self._arena.get_val(*elem.value_ref)
        return Entry(key=key, value=vs.value, meta=vs.meta, expires_at=vs.expires_at)

    def search(self, key: bytes) -> Entry | None:
        """Return the entry stored under ``key``, or ``None``."""
        key = bytes(key)
        with self._lock:
            _, found = self._find(key)
            if found is None:
                return None
            return self._entry_of(found, key)

    def close(self) -> None:
        """Wait for in-flight writes and refuse further ones; reads stay available."""
        with self._lock:
            self._closed = True

    def iterator(self) -> SkipListIterator:
        return SkipListIterator(self)

    def __iter__(self) -> _PyIterator[Entry]:
        it = self.iterator()
        it.rewind()
        while it.valid():
            yield it.item()
            it.next()


class SkipListIterator(Iterator):
    """Walks the bottom level of a skip list in key order."""

    def __init__(self, skiplist: SkipList) -> None:
        self._list = skiplist
        self._elem: _Element | None = None

    def next(self) -> None:
        if self._elem is None:
            raise CoreKVError("Assert failed: iterator is not valid")
        self._elem = self._elem.levels[0]

    def valid(self) -> bool:
        return self._elem is not None

    def rewind(self) -> None:
        self._elem = self._list._head.levels[0]

    def item(self) -> Entry:
        if self._elem is None:
            raise CoreKVError("Assert failed: iterator is not valid")
        return self._list._entry_of(self._elem, self._list._key_of(self._elem))

    def close(self) -> None:
        self._elem = None

    def seek(self, key: bytes) -> None:
        """Position at the first entry whose key is not less than ``key``."""
        with self._list._lock:
            path, found = self._list._find(bytes(key))
            self._elem = found if found is not None else path[0].levels[0]