"""Section-framed binary container.

Layout: [Magic(4) | Version(u32) | NSections(u32)] followed by NSections
entries of [SectionId(u32) | Length(u64) | payload]. Readers scan the table
for offsets only; writers emit a zero length placeholder and backpatch it
when the section ends.
"""
from __future__ import annotations

import enum
import logging
import struct
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping
from warnings import warn

from .channel import FileChannel
from .errors import (
    AlreadyOpenError,
    BadMagicError,
    ClosedFileError,
    DuplicateSectionError,
    MissingSectionError,
    NotOpenError,
    SectionCountError,
    SectionStillOpenError,
    SizeMismatchError,
    TruncatedFileError,
    UnsupportedVersionError,
)
from .protocol import (
    FILE_HEADER_FMT,
    FILE_HEADER_LEN,
    KNOWN_SECTIONS,
    SECTION_HEADER_FMT,
    SECTION_HEADER_LEN,
    SECTION_SIZE_LEN,
)

log = logging.getLogger(__name__)


class FileState(enum.Enum):
    IDLE = "idle"
    WRITING = "writing"
    READING = "reading"
    CLOSED = "closed"


@dataclass(frozen=True)
class SectionEntry:
    section_id: int
    offset: int  # first payload byte
    size: int

    @property
    def end(self) -> int:
        return self.offset + self.size


class SectionDirectory:
    """Immutable index of section entries, grouped by id in first-seen order."""

    def __init__(self, entries: list[SectionEntry]):
        self.entries: tuple[SectionEntry, ...] = tuple(entries)
        grouped: dict[int, list[SectionEntry]] = {}
        for entry in self.entries:
            grouped.setdefault(entry.section_id, []).append(entry)
        self._by_id: Mapping[int, tuple[SectionEntry, ...]] = MappingProxyType(
            {sid: tuple(group) for sid, group in grouped.items()}
        )

    def __contains__(self, section_id: int) -> bool:
        return section_id in self._by_id

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, section_id: int) -> tuple[SectionEntry, ...]:
        return self._by_id.get(section_id, ())

    def ids(self) -> list[int]:
        return list(self._by_id)

    def unique(self, section_id: int, name: str = "<file>") -> SectionEntry:
        found = self.get(section_id)
        if not found:
            raise MissingSectionError(f"{name}: Missing section {section_id}")
        if len(found) > 1:
            raise DuplicateSectionError(
                f"{name}: Section {section_id} duplicated ({len(found)} entries)"
            )
        return found[0]


class BinFile:
    """Framing state machine over a FileChannel.

    Exactly one section may be open at a time. All reads and writes go through
    the channel so the section bookkeeping can compare positions.
    """

    def __init__(
        self,
        channel: FileChannel,
        magic: bytes,
        version: int,
        directory: SectionDirectory | None = None,
        n_sections: int | None = None,
    ):
        self.channel = channel
        self.magic = magic
        self.version = version
        self.directory = directory
        self.n_sections = n_sections
        self.state = FileState.IDLE
        self.sections_written = 0
        self._reading: SectionEntry | None = None
        self._size_pos: int | None = None

    @property
    def name(self) -> str:
        return self.channel.name

    @property
    def writable(self) -> bool:
        return self.directory is None

    # -- opening -----------------------------------------------------------

    @classmethod
    def open(cls, channel: FileChannel, magic: bytes, max_version: int) -> "BinFile":
        """Check magic and version, then scan the section table."""
        try:
            preamble = channel.read(FILE_HEADER_LEN)
        except TruncatedFileError:
            raise BadMagicError(f"{channel.name}: File too short for a container header") from None
        found_magic, version, n_sections = struct.unpack(FILE_HEADER_FMT, preamble)

        if found_magic != magic:
            raise BadMagicError(f"{channel.name}: Invalid file format {found_magic!r}, expected {magic!r}")
        if version > max_version:
            raise UnsupportedVersionError(
                f"{channel.name}: Version {version} not supported (max {max_version})"
            )

        file_size = channel.size()
        entries: list[SectionEntry] = []
        for _ in range(n_sections):
            section_id, size = struct.unpack(SECTION_HEADER_FMT, channel.read(SECTION_HEADER_LEN))
            entry = SectionEntry(section_id, channel.tell(), size)
            if entry.end > file_size:
                raise TruncatedFileError(
                    f"{channel.name}: Section {section_id} at offset {entry.offset} "
                    f"declares {size} bytes past end of file ({file_size})"
                )
            if section_id not in KNOWN_SECTIONS:
                warn(f"{channel.name}: Unknown section id {section_id} at offset {entry.offset}")
            entries.append(entry)
            channel.seek(entry.end)

        log.debug("%s: scanned %d sections", channel.name, n_sections)
        return cls(channel, found_magic, version, directory=SectionDirectory(entries), n_sections=n_sections)

    @classmethod
    def create(cls, channel: FileChannel, magic: bytes, version: int, n_sections: int) -> "BinFile":
        if len(magic) != 4:
            raise ValueError(f"Magic must be 4 bytes, got {magic!r}")
        channel.write(struct.pack(FILE_HEADER_FMT, magic, version, n_sections))
        return cls(channel, magic, version, n_sections=n_sections)

    # -- state checks ------------------------------------------------------

    def _require_idle(self) -> None:
        if self.state is FileState.CLOSED:
            raise ClosedFileError(f"{self.name}: File is closed")
        if self.state is not FileState.IDLE:
            raise AlreadyOpenError(f"{self.name}: Already {self.state.value} a section")

    # -- writing -----------------------------------------------------------

    def start_write_section(self, section_id: int) -> None:
        self._require_idle()
        if not self.writable:
            raise NotOpenError(f"{self.name}: File was not opened for writing")
        self.channel.write_u32(section_id)
        self._size_pos = self.channel.tell()
        self.channel.write_u64(0)  # patched by end_write_section
        self.state = FileState.WRITING
        log.debug("%s: writing section %d", self.name, section_id)

    def end_write_section(self) -> int:
        if self.state is not FileState.WRITING:
            raise NotOpenError(f"{self.name}: Not writing a section")
        size_pos = self._size_pos
        end_pos = self.channel.tell()
        section_size = end_pos - size_pos - SECTION_SIZE_LEN
        self.channel.seek(size_pos)
        self.channel.write_u64(section_size)
        self.channel.seek(end_pos)
        self._size_pos = None
        self.state = FileState.IDLE
        self.sections_written += 1
        return section_size

    # -- reading -----------------------------------------------------------

    def start_read_unique_section(self, section_id: int) -> SectionEntry:
        self._require_idle()
        if self.directory is None:
            raise NotOpenError(f"{self.name}: File was not opened for reading")
        entry = self.directory.unique(section_id, self.name)
        self.channel.seek(entry.offset)
        self._reading = entry
        self.state = FileState.READING
        log.debug("%s: reading section %d (%d bytes)", self.name, section_id, entry.size)
        return entry

    def end_read_section(self, no_check: bool = False) -> None:
        if self.state is not FileState.READING:
            raise NotOpenError(f"{self.name}: Not reading a section")
        entry = self._reading
        if not no_check:
            consumed = self.channel.tell() - entry.offset
            if consumed != entry.size:
                raise SizeMismatchError(
                    f"{self.name}: Invalid section size reading section {entry.section_id}: "
                    f"consumed {consumed}, declared {entry.size}"
                )
        self._reading = None
        self.state = FileState.IDLE

    def remaining(self) -> int:
        """Bytes left in the section currently being read."""
        if self.state is not FileState.READING:
            raise NotOpenError(f"{self.name}: Not reading a section")
        return self._reading.end - self.channel.tell()

    def read_bounded(self, n: int) -> bytes:
        """Read ``n`` bytes, refusing requests that run past the open section."""
        left = self.remaining()
        if n > left:
            raise SizeMismatchError(
                f"{self.name}: Section {self._reading.section_id} has {left} bytes left, "
                f"{n} requested at offset {self.channel.tell()}"
            )
        return self.channel.read(n)

    def read_section(self, section_id: int) -> bytes:
        """Read the raw payload of a unique section."""
        entry = self.start_read_unique_section(section_id)
        data = self.channel.read(entry.size)
        self.end_read_section()
        return data

    # -- closing -----------------------------------------------------------

    def close(self) -> None:
        if self.state is FileState.CLOSED:
            raise ClosedFileError(f"{self.name}: File already closed")
        if self.state is not FileState.IDLE:
            raise SectionStillOpenError(
                f"{self.name}: Cannot close while {self.state.value} a section"
            )
        if self.writable and self.sections_written != self.n_sections:
            raise SectionCountError(
                f"{self.name}: Declared {self.n_sections} sections, wrote {self.sections_written}"
            )
        self.channel.close()
        self.state = FileState.CLOSED

    def discard(self) -> None:
        """Release the channel without any state checks (abort path)."""
        if not self.channel.closed:
            self.channel.close()
        self._reading = None
        self._size_pos = None
        self.state = FileState.CLOSED

    def __enter__(self) -> "BinFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.discard()
        elif self.state is not FileState.CLOSED:
            self.close()


@contextmanager
def open_bin_file(path: Path, magic: bytes, max_version: int) -> Iterator[BinFile]:
    channel = FileChannel.open_read(Path(path))
    try:
        bin_file = BinFile.open(channel, magic, max_version)
    except BaseException:
        channel.close()
        raise
    with bin_file:
        yield bin_file


@contextmanager
def create_bin_file(path: Path, magic: bytes, version: int, n_sections: int) -> Iterator[BinFile]:
    channel = FileChannel.create(Path(path))
    try:
        bin_file = BinFile.create(channel, magic, version, n_sections)
    except BaseException:
        channel.close()
        raise
    with bin_file:
        yield bin_file
