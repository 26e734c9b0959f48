from __future__ import annotations

from typing import BinaryIO, List, Optional

from . import requires
from .chunkemit import emit_chunk_blocks
from .codec import Codec
from .constants import BLOCK_SIZE, INT32_MAX
from .errors import ArgumentError
from .header import pack_header
from .model import Chunk, ChunkLayout
from .trailer import write_index_trailer


class ArchiveWriter:
    """Streaming writer that lays out chunks as compressed, obfuscated blocks.

    The header goes out on ``open`` with a zero chunk count; ``finalize``
    patches the count and appends the index and footer. A writer that is
    closed without ``finalize`` leaves an unreadable file.
    """

    def __init__(
        self,
        out_path: str,
        *,
        block_size: int = BLOCK_SIZE,
        level: Optional[int] = None,
    ):
        self.out_path = requires.path_like(out_path, "out_path")
        self.block_size = requires.in_range(block_size, 1, BLOCK_SIZE, "block_size")
        if level is not None:
            requires.in_range(level, 0, 9, "level")
        self.codec = Codec(level=level)
        self.f: Optional[BinaryIO] = None
        self.layouts: List[ChunkLayout] = []
        self.index_offset: Optional[int] = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self.f is not None:
            return
        self.f = open(self.out_path, "wb")
        self.f.write(pack_header(0))

    def close(self):
        if self.f is not None:
            self.f.close()
            self.f = None

    def add_chunk(self, chunk: Chunk) -> ChunkLayout:
        """Write every block of ``chunk`` and remember its layout for the index."""
        if self.f is None:
            raise RuntimeError("Archive not open")
        if self.index_offset is not None:
            raise RuntimeError("Archive already finalized")
        if chunk.original_size > INT32_MAX:
            raise ArgumentError(f"Entry too large for the index: {chunk.path!r} ({chunk.original_size} bytes)")
        if len(self.layouts) >= INT32_MAX:
            raise ArgumentError("Too many entries")
        layout = emit_chunk_blocks(self.f, chunk, self.codec, self.block_size)
        self.layouts.append(layout)
        return layout

    def finalize(self) -> int:
        """Append index and footer, then patch the header chunk count.

        Returns the index offset.
        """
        if self.f is None:
            raise RuntimeError("Archive not open")
        if self.index_offset is not None:
            return self.index_offset
        self.index_offset = write_index_trailer(self.f, self.layouts)
        end = self.f.tell()
        self.f.seek(0)
        self.f.write(pack_header(len(self.layouts)))
        self.f.seek(end)
        self.f.flush()
        return self.index_offset


def write_archive(out_path: str, chunks, *, block_size: int = BLOCK_SIZE, level: Optional[int] = None) -> List[ChunkLayout]:
    """Write ``chunks`` in order to ``out_path``; return the layouts that were written."""
    with ArchiveWriter(out_path, block_size=block_size, level=level) as w:
        for chunk in chunks:
            w.add_chunk(chunk)
        w.finalize()
        return w.layouts
