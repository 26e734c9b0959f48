from __future__ import annotations

from typing import BinaryIO

from .codec import Codec
from .constants import BLOCK_SIZE
from .model import Chunk, ChunkLayout
from .records import write_block


def emit_chunk_blocks(fh: BinaryIO, chunk: Chunk, codec: Codec, block_size: int = BLOCK_SIZE) -> ChunkLayout:
    """Split ``chunk.data`` into slices and append each encoded slice at the file cursor.

    Layout is always computed fresh here; offsets are the real positions
    in ``fh``.
    """
    layout = ChunkLayout(path=chunk.path, original_size=chunk.original_size)
    data = memoryview(chunk.data)
    pos = 0
    while pos < len(data):
        raw = data[pos : pos + block_size]
        stored = codec.encode_block(raw)
        layout.blocks.append(write_block(fh, stored, len(raw)))
        pos += len(raw)
    return layout
