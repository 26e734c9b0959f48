"""
Index and footer encoding.

Index (at index_offset), repeated per chunk:
- path_len i32, path bytes (utf-8)
- original_size i32, block_count i32
- repeated per block: offset i64, length i32, size i32

Footer (last 12 bytes): index_offset i64, footer_magic u32
"""

from __future__ import annotations

from typing import BinaryIO, List, Optional, Sequence, Tuple

from .constants import (
    BLOCK_SIZE,
    BLOCK_STRUCT,
    CHUNK_INFO_STRUCT,
    FOOTER_MAGIC,
    FOOTER_STRUCT,
    HEADER_SIZE,
    PATH_LEN_STRUCT,
)
from .errors import BoundsError, FormatError
from .model import Block, ChunkLayout
from .result import Result


def dumps_index(layouts: Sequence[ChunkLayout]) -> bytes:
    out = bytearray()
    for lay in layouts:
        pb = lay.path.encode("utf-8")
        out += PATH_LEN_STRUCT.pack(len(pb))
        out += pb
        out += CHUNK_INFO_STRUCT.pack(lay.original_size, len(lay.blocks))
        for b in lay.blocks:
            out += BLOCK_STRUCT.pack(b.offset, b.length, b.size)
    return bytes(out)


def _take(data: bytes, pos: int, n: int) -> Tuple[Optional[bytes], int]:
    if n < 0 or pos + n > len(data):
        return None, pos
    return data[pos : pos + n], pos + n


def loads_index(data: bytes, chunk_count: int) -> Result[List[ChunkLayout]]:
    """Parse ``chunk_count`` index records from ``data``.

    Block offsets are not checked here; that needs the file length and
    happens when blocks are read.
    """
    layouts: List[ChunkLayout] = []
    pos = 0
    for i in range(chunk_count):
        raw, pos = _take(data, pos, PATH_LEN_STRUCT.size)
        if raw is None:
            return Result.fail(FormatError(f"index truncated at record {i}"))
        (path_len,) = PATH_LEN_STRUCT.unpack(raw)
        pb, pos = _take(data, pos, path_len)
        if pb is None:
            return Result.fail(FormatError(f"invalid path length in record {i}"))
        try:
            path = pb.decode("utf-8")
        except UnicodeDecodeError:
            return Result.fail(FormatError(f"invalid path encoding in record {i}"))
        raw, pos = _take(data, pos, CHUNK_INFO_STRUCT.size)
        if raw is None:
            return Result.fail(FormatError(f"index truncated at record {i}"))
        original_size, block_count = CHUNK_INFO_STRUCT.unpack(raw)
        if original_size < 0 or block_count < 0:
            return Result.fail(FormatError(f"negative size or block count in record {i}"))
        lay = ChunkLayout(path=path, original_size=original_size)
        for _ in range(block_count):
            raw, pos = _take(data, pos, BLOCK_STRUCT.size)
            if raw is None:
                return Result.fail(FormatError(f"index truncated in blocks of {path!r}"))
            offset, length, size = BLOCK_STRUCT.unpack(raw)
            if length < 0 or size < 0 or size > BLOCK_SIZE:
                return Result.fail(FormatError(f"invalid block size in {path!r}"))
            lay.blocks.append(Block(offset=offset, length=length, size=size))
        if sum(b.size for b in lay.blocks) != original_size:
            return Result.fail(FormatError(f"block sizes do not add up for {path!r}"))
        layouts.append(lay)
    return Result.ok(layouts)


def write_index_trailer(fh: BinaryIO, layouts: Sequence[ChunkLayout]) -> int:
    """Append the index and footer at the current position; return index_offset."""
    index_offset = fh.tell()
    fh.write(dumps_index(layouts))
    fh.write(FOOTER_STRUCT.pack(index_offset, FOOTER_MAGIC))
    fh.flush()
    return index_offset


def read_footer(f: BinaryIO, file_size: int) -> Result[int]:
    """Return index_offset after validating the footer magic and its bounds."""
    if file_size < HEADER_SIZE + FOOTER_STRUCT.size:
        return Result.fail(FormatError("archive truncated: no room for footer"))
    f.seek(file_size - FOOTER_STRUCT.size)
    raw = f.read(FOOTER_STRUCT.size)
    if len(raw) != FOOTER_STRUCT.size:
        return Result.fail(FormatError("archive truncated: short footer"))
    index_offset, magic = FOOTER_STRUCT.unpack(raw)
    if magic != FOOTER_MAGIC:
        return Result.fail(FormatError("invalid signature"))
    if index_offset < HEADER_SIZE or index_offset > file_size - FOOTER_STRUCT.size:
        return Result.fail(BoundsError("invalid index offset"))
    return Result.ok(index_offset)
