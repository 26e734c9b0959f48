from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Block:
    offset: int  # absolute file position of the stored payload
    length: int  # stored (compressed + obfuscated) byte length
    size: int    # raw byte length of the slice


@dataclass(frozen=True)
class Chunk:
    """One named entry: a normalized archive path and its raw bytes."""

    path: str
    data: bytes = field(repr=False)

    @property
    def original_size(self) -> int:
        return len(self.data)


@dataclass
class ChunkLayout:
    """Physical placement of a chunk, produced by the writer or read from the index."""

    path: str
    original_size: int
    blocks: List[Block] = field(default_factory=list)

    @property
    def stored_size(self) -> int:
        return sum(b.length for b in self.blocks)
