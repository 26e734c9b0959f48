"""
Public archive API.

An :class:`Archive` is an ordered list of named chunks kept in memory.
``save`` lays every chunk out as compressed, obfuscated blocks followed by
an index and footer; ``load`` validates a file and rebuilds every chunk.
Neither call is safe to share across threads on one instance.
"""

from __future__ import annotations

import asyncio
import os
from concurrent.futures import Executor
from typing import Iterator, List, Optional, Tuple

from . import requires
from .constants import BLOCK_SIZE, INT32_MAX
from .errors import ArgumentError
from .model import Chunk, ChunkLayout
from .pathutil import norm_path, safe_join
from .reader import ArchiveReader
from .writer import write_archive


_EXISTS_POLICIES = ("overwrite", "skip", "fail")


class Archive:
    def __init__(self):
        self._chunks: List[Chunk] = []
        self._layout: List[ChunkLayout] = []

    @property
    def chunks(self) -> Tuple[Chunk, ...]:
        return tuple(self._chunks)

    @property
    def layout(self) -> Tuple[ChunkLayout, ...]:
        """Block layout from the last save or load; empty after any add."""
        return tuple(self._layout)

    def __len__(self) -> int:
        return len(self._chunks)

    def __iter__(self) -> Iterator[Chunk]:
        return iter(self._chunks)

    def get(self, path: str) -> Optional[Chunk]:
        """First chunk stored under ``path`` (separators normalized), or None."""
        p = norm_path(path)
        return next((c for c in self._chunks if c.path == p), None)

    def add_file(self, path: str, data: bytes) -> Chunk:
        """Append an entry; ``data`` is copied so later caller edits do not leak in."""
        requires.not_empty_str(path, "path")
        raw = requires.byte_buffer(data, "data")
        if len(raw) > INT32_MAX:
            raise ArgumentError(f"data too large for one entry ({len(raw)} bytes)")
        chunk = Chunk(path=norm_path(path), data=raw)
        self._chunks.append(chunk)
        self._layout = []
        return chunk

    def add_file_from_disk(self, file_path: str, archive_path: Optional[str] = None) -> Chunk:
        file_path = requires.path_like(file_path, "file_path")
        if archive_path is not None:
            requires.not_empty_str(archive_path, "archive_path")
        with open(file_path, "rb") as fh:
            data = fh.read()
        return self.add_file(archive_path if archive_path is not None else os.path.basename(file_path), data)

    def save(self, path: str, *, block_size: int = BLOCK_SIZE, level: Optional[int] = None) -> None:
        """Write the archive to ``path``, replacing any existing file.

        Not atomic: if writing fails part way, ``path`` is left truncated.
        """
        path = requires.path_like(path, "path")
        self._layout = []
        self._layout = write_archive(path, self._chunks, block_size=block_size, level=level)

    @classmethod
    def load(cls, path: str) -> "Archive":
        """Read and fully decode ``path``.

        Raises FormatError or BoundsError for malformed files; no partially
        populated archive is ever returned.
        """
        with ArchiveReader(path) as r:
            chunks = r.read_all()
            layout = list(r.layout)
        pak = cls()
        pak._chunks = chunks
        pak._layout = layout
        return pak

    async def save_async(self, path: str, *, executor: Optional[Executor] = None, **kwargs) -> None:
        """Run :meth:`save` on an executor thread.

        Cancelling before the job starts skips it; once started it runs to
        completion.
        """
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(executor, lambda: self.save(path, **kwargs))

    @classmethod
    async def load_async(cls, path: str, *, executor: Optional[Executor] = None) -> "Archive":
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, cls.load, path)

    def extract_all(self, outdir: str, paths: Optional[List[str]] = None, *, exists: str = "overwrite") -> List[str]:
        """Write chunks below ``outdir``; return the files written.

        ``paths`` limits extraction to those entries and anything below them.
        ``exists`` decides what happens to a destination that is already
        there: "overwrite", "skip", or "fail" (FileExistsError, raised before
        anything is written).
        """
        outdir = requires.path_like(outdir, "outdir")
        if exists not in _EXISTS_POLICIES:
            raise ArgumentError(f"exists must be one of {', '.join(_EXISTS_POLICIES)}, got {exists!r}")
        selected = self._chunks
        if paths:
            wanted = [norm_path(p).strip("/") for p in paths]
            selected = [c for c in self._chunks if any(c.path == w or c.path.startswith(w + "/") for w in wanted)]
        targets = [(c, safe_join(outdir, c.path)) for c in selected]
        if exists != "overwrite":
            present = [dest for _, dest in targets if os.path.lexists(dest)]
            if present and exists == "fail":
                raise FileExistsError(f"Destination exists: {present[0]}")
            targets = [(c, dest) for c, dest in targets if dest not in present]
        written: List[str] = []
        for chunk, dest in targets:
            os.makedirs(os.path.dirname(dest) or ".", exist_ok=True)
            with open(dest, "wb") as wf:
                wf.write(chunk.data)
            written.append(dest)
        return written
