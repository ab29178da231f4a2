"""Random-access byte channel over a buffered binary file."""
from __future__ import annotations

import os
import struct
from pathlib import Path
from typing import BinaryIO

from .errors import TruncatedFileError
from .field import decode_uint, encode_uint
from .protocol import CHANNEL_BUFFER_SIZE, U32_LEN, U64_LEN


class FileChannel:
    """Thin wrapper adding strict reads and typed integer helpers to a file.

    The channel owns its cursor; every decode routine advances it through
    ``read`` and nothing else.
    """

    def __init__(self, f: BinaryIO, name: str = "<stream>"):
        self.f = f
        self.name = name

    @classmethod
    def open_read(cls, path: Path, buffer_size: int = CHANNEL_BUFFER_SIZE) -> "FileChannel":
        return cls(open(path, "rb", buffering=buffer_size), str(path))

    @classmethod
    def create(cls, path: Path, buffer_size: int = CHANNEL_BUFFER_SIZE) -> "FileChannel":
        return cls(open(path, "w+b", buffering=buffer_size), str(path))

    def read(self, n: int) -> bytes:
        start = self.f.tell()
        data = self.f.read(n)
        if len(data) != n:
            raise TruncatedFileError(
                f"{self.name}: wanted {n} bytes at offset {start}, got {len(data)}"
            )
        return data

    def write(self, data: bytes) -> None:
        self.f.write(data)

    def seek(self, pos: int) -> None:
        self.f.seek(pos)

    def tell(self) -> int:
        return self.f.tell()

    def size(self) -> int:
        pos = self.f.tell()
        end = self.f.seek(0, os.SEEK_END)
        self.f.seek(pos)
        return end

    def close(self) -> None:
        self.f.close()

    @property
    def closed(self) -> bool:
        return self.f.closed

    def read_u32(self) -> int:
        return struct.unpack("<I", self.read(U32_LEN))[0]

    def read_u64(self) -> int:
        return struct.unpack("<Q", self.read(U64_LEN))[0]

    def read_uint(self, n8: int) -> int:
        return decode_uint(self.read(n8), n8)

    def write_u32(self, value: int) -> None:
        self.write(encode_uint(value, U32_LEN))

    def write_u64(self, value: int) -> None:
        self.write(encode_uint(value, U64_LEN))

    def write_uint(self, value: int, n8: int) -> None:
        self.write(encode_uint(value, n8))
