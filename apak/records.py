from __future__ import annotations

from typing import BinaryIO

from .codec import Codec
from .errors import BoundsError, FormatError
from .model import Block
from .result import Result


def write_block(f: BinaryIO, stored: bytes, size: int) -> Block:
    off = f.tell()
    f.write(stored)
    return Block(offset=off, length=len(stored), size=size)


def read_exact(f: BinaryIO, n: int) -> Result[bytes]:
    b = f.read(n)
    if len(b) != n:
        return Result.fail(FormatError("unexpected end of file"))
    return Result.ok(b)


def check_block_bounds(block: Block, file_size: int) -> Result[Block]:
    if block.offset < 0 or block.offset >= file_size:
        return Result.fail(BoundsError("invalid block offset"))
    if block.length < 0 or block.offset + block.length > file_size:
        return Result.fail(BoundsError("invalid block length"))
    return Result.ok(block)


def read_block(f: BinaryIO, block: Block, file_size: int, codec: Codec) -> Result[bytes]:
    """Read and decode one block; the result is exactly ``block.size`` bytes."""
    checked = check_block_bounds(block, file_size)
    if checked.failed:
        return Result.fail(checked.error)
    f.seek(block.offset)
    stored = read_exact(f, block.length)
    if stored.failed:
        return stored
    raw = codec.decode_block(stored.value, block.size)
    if raw.failed:
        return raw
    if len(raw.value) != block.size:
        return Result.fail(FormatError("block size mismatch"))
    return raw
