"""Growable sequences for constraint lists and variable maps.

Two interchangeable implementations share one contract (append, extend,
index, len, iterate, close). ``new_sequence`` is the only place that chooses
between them.
"""
from __future__ import annotations

import os
import pickle
import tempfile
from collections import OrderedDict
from typing import Any, Iterable, Iterator

from .protocol import LARGE_SEQUENCE_THRESHOLD, MAX_RESIDENT_PAGES, PAGE_SIZE


class MemorySequence(list):
    """Plain in-memory list with the paged sequence's ``close`` hook."""

    def close(self) -> None:
        pass


class PagedSequence:
    """Append-only sequence that spills sealed pages to a temporary file.

    The tail page is always resident. Sealed pages are pickled into a private
    spill file and reloaded on demand through a small LRU cache, so resident
    memory stays bounded by ``(max_resident_pages + 1) * page_size`` items.
    """

    def __init__(self, page_size: int = PAGE_SIZE, max_resident_pages: int = MAX_RESIDENT_PAGES):
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self.max_resident_pages = max_resident_pages
        self._spill = tempfile.TemporaryFile(prefix="r1cs-pages-")
        self._pages: list[tuple[int, int]] = []  # (offset, length) in spill file
        self._tail: list[Any] = []
        self._cache: OrderedDict[int, list[Any]] = OrderedDict()
        self._len = 0

    def __len__(self) -> int:
        return self._len

    def append(self, item: Any) -> None:
        self._tail.append(item)
        self._len += 1
        if len(self._tail) == self.page_size:
            self._seal()

    def extend(self, items: Iterable[Any]) -> None:
        for item in items:
            self.append(item)

    def _seal(self) -> None:
        blob = pickle.dumps(self._tail, protocol=pickle.HIGHEST_PROTOCOL)
        offset = self._spill.seek(0, os.SEEK_END)
        self._spill.write(blob)
        self._pages.append((offset, len(blob)))
        self._tail = []

    def _load(self, page_no: int) -> list[Any]:
        if page_no == len(self._pages):
            return self._tail
        page = self._cache.get(page_no)
        if page is not None:
            self._cache.move_to_end(page_no)
            return page
        offset, length = self._pages[page_no]
        self._spill.seek(offset)
        page = pickle.loads(self._spill.read(length))
        if self.max_resident_pages > 0:
            self._cache[page_no] = page
            while len(self._cache) > self.max_resident_pages:
                self._cache.popitem(last=False)
        return page

    def __getitem__(self, index: int) -> Any:
        if index < 0:
            index += self._len
        if not 0 <= index < self._len:
            raise IndexError("PagedSequence index out of range")
        page_no, slot = divmod(index, self.page_size)
        return self._load(page_no)[slot]

    def __iter__(self) -> Iterator[Any]:
        for page_no in range(len(self._pages)):
            yield from self._load(page_no)
        yield from list(self._tail)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (PagedSequence, list, tuple)):
            return NotImplemented
        if len(self) != len(other):
            return False
        return all(a == b for a, b in zip(self, other))

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"PagedSequence(len={self._len}, pages={len(self._pages)}, page_size={self.page_size})"

    def close(self) -> None:
        self._cache.clear()
        self._tail = []
        self._spill.close()


def new_sequence(
    expected_len: int,
    threshold: int = LARGE_SEQUENCE_THRESHOLD,
    page_size: int = PAGE_SIZE,
) -> MemorySequence | PagedSequence:
    """Pick the in-memory or paged implementation for ``expected_len`` items."""
    if expected_len > threshold:
        return PagedSequence(page_size=page_size)
    return MemorySequence()
