"""
Block transform pipeline.

Encode is ``obfuscate(compress(raw))`` and decode is
``decompress(obfuscate(stored))``. The XOR step only keeps payloads from
being readable at a glance; it is not encryption.
"""

from __future__ import annotations

import zlib
from typing import Optional

from .constants import DEFLATE_LEVEL, DEFLATE_WBITS, XOR_KEY
from .errors import FormatError
from .result import Result


_XOR_TABLES = {}


def _xor_table(key: int) -> bytes:
    tbl = _XOR_TABLES.get(key)
    if tbl is None:
        tbl = bytes(b ^ key for b in range(256))
        _XOR_TABLES[key] = tbl
    return tbl


def compress(data: bytes, level: int = DEFLATE_LEVEL) -> bytes:
    c = zlib.compressobj(level, zlib.DEFLATED, DEFLATE_WBITS)
    return c.compress(data) + c.flush()


def decompress(data: bytes, max_length: Optional[int] = None) -> bytes:
    """Inflate a raw deflate stream.

    With ``max_length``, at most that many bytes are produced; a stream with
    more output raises ``OverflowError`` instead of being inflated in full.
    """
    d = zlib.decompressobj(DEFLATE_WBITS)
    if max_length is None:
        out = d.decompress(data) + d.flush()
    else:
        out = d.decompress(data, max_length + 1)
        if len(out) > max_length or d.unconsumed_tail:
            raise OverflowError(f"deflate stream inflates past {max_length} bytes")
    if not d.eof:
        raise zlib.error("incomplete deflate stream")
    return out


def obfuscate(data: bytes, key: int = XOR_KEY) -> bytes:
    return bytes(data).translate(_xor_table(key))


class Codec:
    def __init__(self, level: Optional[int] = None, key: int = XOR_KEY):
        self.level = DEFLATE_LEVEL if level is None else level
        self.key = key

    def encode_block(self, raw: bytes) -> bytes:
        return obfuscate(compress(raw, self.level), self.key)

    def decode_block(self, stored: bytes, max_size: Optional[int] = None) -> Result[bytes]:
        try:
            return Result.ok(decompress(obfuscate(stored, self.key), max_size))
        except OverflowError:
            return Result.fail(FormatError("block size mismatch"))
        except zlib.error as exc:
            return Result.fail(FormatError(f"corrupt block payload: {exc}"))
