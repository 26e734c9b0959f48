from __future__ import annotations

import os
from typing import BinaryIO, List, Optional

from . import requires
from .codec import Codec
from .constants import FOOTER_SIZE
from .errors import FormatError
from .header import Header, read_header
from .model import Chunk, ChunkLayout
from .records import check_block_bounds, read_block, read_exact
from .result import Result
from .trailer import loads_index, read_footer


class ArchiveReader:
    """Validates an archive on ``open`` and decodes chunks on demand.

    The file is opened read-only and never modified.
    """

    def __init__(self, path: str):
        self.path = requires.path_like(path, "path")
        self.f: Optional[BinaryIO] = None
        self.header: Optional[Header] = None
        self.file_size: int = 0
        self.index_offset: int = 0
        self.layout: List[ChunkLayout] = []
        self.codec = Codec()

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self.f is not None:
            return
        self.f = open(self.path, "rb")
        try:
            self.file_size = os.fstat(self.f.fileno()).st_size
            self.header = read_header(self.f).unwrap()
            self.index_offset = read_footer(self.f, self.file_size).unwrap()
            self.layout = self._load_index().unwrap()
        except (OSError, ValueError):
            # ApakError is an OSError; close the handle before it propagates
            self.close()
            raise

    def close(self):
        if self.f is not None:
            self.f.close()
            self.f = None

    def list(self) -> List[ChunkLayout]:
        return self.layout

    def read_chunk(self, layout: ChunkLayout) -> bytes:
        return self._decode_chunk(layout).unwrap()

    def read_all(self) -> List[Chunk]:
        """Materialize every chunk in index order."""
        return [Chunk(path=lay.path, data=self.read_chunk(lay)) for lay in self.layout]

    # internals
    def _load_index(self) -> Result[List[ChunkLayout]]:
        assert self.f is not None and self.header is not None
        self.f.seek(self.index_offset)
        raw = read_exact(self.f, self.file_size - FOOTER_SIZE - self.index_offset)
        if raw.failed:
            return Result.fail(raw.error)
        return loads_index(raw.value, self.header.chunk_count)

    def _decode_chunk(self, layout: ChunkLayout) -> Result[bytes]:
        if self.f is None:
            raise RuntimeError("Archive not open")
        for block in layout.blocks:
            checked = check_block_bounds(block, self.file_size)
            if checked.failed:
                return Result.fail(checked.error)
        # grows only with data that decoded to its recorded size
        out = bytearray()
        for block in layout.blocks:
            raw = read_block(self.f, block, self.file_size, self.codec)
            if raw.failed:
                return Result.fail(raw.error)
            out += raw.value
        if len(out) != layout.original_size:
            return Result.fail(FormatError(f"chunk size mismatch for {layout.path!r}"))
        return Result.ok(bytes(out))
