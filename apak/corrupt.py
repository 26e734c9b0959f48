from __future__ import annotations

import argparse
import os
import random
import struct
from typing import Optional

from apak.constants import BLOCK_STRUCT, CHUNK_INFO_STRUCT, PATH_LEN_STRUCT
from apak.reader import ArchiveReader


def flip_byte(path: str, offset: int, xor_val: int = 0xFF) -> None:
    if offset < 0:
        raise ValueError("Offset must be non-negative")
    with open(path, "r+b") as f:
        f.seek(offset)
        b = f.read(1)
        if not b:
            raise ValueError("Offset beyond end of file")
        f.seek(offset)
        f.write(bytes([b[0] ^ (xor_val & 0xFF)]))
        f.flush()
        os.fsync(f.fileno())


def truncate(path: str, size: int) -> None:
    with open(path, "r+b") as f:
        f.truncate(size)


def block_record_offset(path: str, chunk_index: int, block_index: int) -> int:
    """File position of a block's index record (its i64 offset field)."""
    with ArchiveReader(path) as r:
        layout = r.list()
        if chunk_index < 0 or chunk_index >= len(layout):
            raise ValueError(f"Chunk index out of range (0..{len(layout) - 1})")
        if block_index < 0 or block_index >= len(layout[chunk_index].blocks):
            raise ValueError("Block index out of range")
        pos = r.index_offset
        for lay in layout[:chunk_index]:
            pos += PATH_LEN_STRUCT.size + len(lay.path.encode("utf-8"))
            pos += CHUNK_INFO_STRUCT.size + BLOCK_STRUCT.size * len(lay.blocks)
        lay = layout[chunk_index]
        pos += PATH_LEN_STRUCT.size + len(lay.path.encode("utf-8")) + CHUNK_INFO_STRUCT.size
        return pos + BLOCK_STRUCT.size * block_index


def set_block_offset(path: str, chunk_index: int, block_index: int, new_offset: int) -> None:
    pos = block_record_offset(path, chunk_index, block_index)
    with open(path, "r+b") as f:
        f.seek(pos)
        f.write(struct.pack("<q", new_offset))


def cmd_by_offset(args: argparse.Namespace) -> None:
    flip_byte(args.archive, args.offset, xor_val=args.xor)
    print(f"Flipped 1 byte at offset {args.offset}")


def cmd_truncate(args: argparse.Namespace) -> None:
    truncate(args.archive, args.size)
    print(f"Truncated to {args.size} bytes")


def cmd_block_offset(args: argparse.Namespace) -> None:
    set_block_offset(args.archive, args.chunk, args.block, args.value)
    print(f"Set chunk {args.chunk} block {args.block} offset to {args.value}")


def cmd_random(args: argparse.Namespace) -> None:
    rng = random.Random(args.seed)
    size = os.path.getsize(args.archive)
    for _ in range(args.count):
        flip_byte(args.archive, rng.randrange(0, size), xor_val=args.xor)
    print(f"Flipped {args.count} byte(s) at random offsets")


def main(argv: Optional[list[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="apak.corrupt", description="Corrupt APAK archives for testing")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_off = sub.add_parser("offset", help="Flip one byte at an absolute offset")
    ap_off.add_argument("archive")
    ap_off.add_argument("offset", type=int)
    ap_off.add_argument("--xor", type=int, default=0xFF)
    ap_off.set_defaults(func=cmd_by_offset)

    ap_tr = sub.add_parser("truncate", help="Truncate the archive to SIZE bytes")
    ap_tr.add_argument("archive")
    ap_tr.add_argument("size", type=int)
    ap_tr.set_defaults(func=cmd_truncate)

    ap_blk = sub.add_parser("block-offset", help="Rewrite a block's recorded offset in the index")
    ap_blk.add_argument("archive")
    ap_blk.add_argument("--chunk", type=int, default=0)
    ap_blk.add_argument("--block", type=int, default=0)
    ap_blk.add_argument("value", type=int)
    ap_blk.set_defaults(func=cmd_block_offset)

    ap_rand = sub.add_parser("random", help="Flip bytes at random offsets")
    ap_rand.add_argument("archive")
    ap_rand.add_argument("--count", type=int, default=1)
    ap_rand.add_argument("--seed", type=int, default=None)
    ap_rand.add_argument("--xor", type=int, default=0xFF)
    ap_rand.set_defaults(func=cmd_random)

    args = ap.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
