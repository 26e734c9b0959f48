from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from .constants import HEADER_STRUCT, MAGIC, VERSION
from .errors import FormatError
from .result import Result


@dataclass
class Header:
    version: int
    chunk_count: int


def pack_header(chunk_count: int) -> bytes:
    return HEADER_STRUCT.pack(MAGIC, VERSION, chunk_count)


def read_header(f: BinaryIO) -> Result[Header]:
    f.seek(0)
    raw = f.read(HEADER_STRUCT.size)
    if len(raw) != HEADER_STRUCT.size:
        if raw[: len(MAGIC)] != MAGIC[: len(raw)]:
            return Result.fail(FormatError("invalid signature"))
        return Result.fail(FormatError("header truncated"))
    magic, version, count = HEADER_STRUCT.unpack(raw)
    if magic != MAGIC:
        return Result.fail(FormatError("invalid signature"))
    if version != VERSION:
        return Result.fail(FormatError(f"version mismatch: {version} (expected {VERSION})"))
    if count < 0:
        return Result.fail(FormatError("negative chunk count"))
    return Result.ok(Header(version=version, chunk_count=count))
