from __future__ import annotations

import os
import sys
import time
import argparse

from pathlib import Path
from typing import List, Optional, Tuple

from apak.archive import Archive
from apak.constants import VERSION
from apak.errors import ArgumentError, BoundsError, FormatError
from apak.pathutil import norm_path
from apak.reader import ArchiveReader


def _collect_inputs(inputs: List[str]) -> List[Tuple[str, str]]:
    """Expand files/directories into (archive path, filesystem path) pairs.

    Files keep their base name; directories are stored as
    ``<dirname>/<relative path>``. Symlinked directories are not followed.
    """
    files: List[Tuple[str, str]] = []
    for raw in inputs:
        p = Path(raw)
        if p.is_dir():
            base = p.resolve().name
            for root, dirnames, filenames in os.walk(str(p)):
                dirnames[:] = sorted(d for d in dirnames if not os.path.islink(os.path.join(root, d)))
                for f in sorted(filenames):
                    full = os.path.join(root, f)
                    rel = os.path.relpath(full, start=str(p))
                    files.append((norm_path(os.path.join(base, rel)), full))
        elif p.exists():
            files.append((p.name, str(p)))
        else:
            raise FileNotFoundError(f"No such file or directory: {raw}")
    return files


def cmd_pack(output: str, inputs: List[str], *, quiet: bool = False) -> bool:
    """Pack files and directories into a new archive.

    Args:
        output: Path of the archive to write (replaced if it exists).
        inputs: Files or directories to store.
        quiet: Only print the final summary.
    """
    files = _collect_inputs(inputs)
    total_bytes = sum(os.path.getsize(full) for _, full in files) or 1
    processed = 0
    t0 = time.time()

    pak = Archive()
    for arc, full in files:
        chunk = pak.add_file_from_disk(full, arc)
        processed += chunk.original_size
        if not quiet:
            pct = processed * 100.0 / total_bytes
            print(f" {pct:6.2f}% packing: {arc}")
    pak.save(output)

    dt = max(0.000001, time.time() - t0)
    stored = sum(lay.stored_size for lay in pak.layout)
    mib = processed / (1024.0 * 1024.0)
    print(f"Done: {len(files)} files; {mib:.2f} MiB in {dt:.1f}s; stored {stored} bytes")
    return True


def cmd_list(archive: str) -> bool:
    """List entries without decoding payloads: size, block count, path."""
    with ArchiveReader(archive) as r:
        for lay in r.list():
            print(f"{lay.original_size}\t{len(lay.blocks)}\t{lay.path}")
    return True


def cmd_info(archive: str) -> bool:
    with ArchiveReader(archive) as r:
        original = sum(lay.original_size for lay in r.layout)
        stored = sum(lay.stored_size for lay in r.layout)
        print(f"Archive: {archive}")
        print(f"  Version: {r.header.version if r.header else VERSION}")
        print(f"  Entries: {len(r.layout)}")
        print(f"  Blocks: {sum(len(lay.blocks) for lay in r.layout)}")
        print(f"  Original bytes: {original}")
        print(f"  Stored bytes: {stored}")
        print(f"  Index offset: {r.index_offset}")
    return True


def cmd_unpack(archive: str, *, outdir: str = ".", paths: Optional[List[str]] = None, exists: str = "overwrite", quiet: bool = False) -> bool:
    """Unpack entries from an archive into a directory.

    Args:
        archive: Archive path.
        outdir: Destination directory.
        paths: Only these entries (or entries below them); all when empty.
        exists: "overwrite", "skip", or "fail" when a destination file exists.
    """
    pak = Archive.load(archive)
    written = pak.extract_all(outdir, paths, exists=exists)
    if not quiet:
        for dest in written:
            print(f" unpacked: {dest}")
    print(f"Done: {len(written)} files")
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="apak",
        description="APAK archive tool",
        epilog="Payloads are obfuscated, not encrypted.",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_pack = sub.add_parser("pack", help="Pack files into an archive")
    ap_pack.add_argument("output", help="Output archive path")
    ap_pack.add_argument("inputs", nargs="+", help="Input files/directories")
    ap_pack.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_unpack = sub.add_parser("unpack", help="Unpack files")
    ap_unpack.add_argument("archive", help="Archive path")
    ap_unpack.add_argument("--outdir", default=".", help="Output directory")
    ap_unpack.add_argument("paths", nargs="*", help="Specific archive paths to extract (files or directories)")
    ap_unpack.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")
    ap_unpack.add_argument(
        "--exists",
        choices=["overwrite", "skip", "fail"],
        default="overwrite",
        help="What to do if a destination file exists (default: overwrite)",
    )

    ap_list = sub.add_parser("list", help="List archive contents")
    ap_list.add_argument("archive", help="Archive path")

    ap_info = sub.add_parser("info", help="Show archive information")
    ap_info.add_argument("archive", help="Archive path")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "pack":
            cmd_pack(args.output, args.inputs, quiet=args.quiet)
        elif args.cmd == "unpack":
            cmd_unpack(args.archive, outdir=args.outdir, paths=args.paths, exists=args.exists, quiet=args.quiet)
        elif args.cmd == "list":
            cmd_list(args.archive)
        elif args.cmd == "info":
            cmd_info(args.archive)
        else:
            raise RuntimeError("Unknown command")
    except (FormatError, BoundsError) as e:
        target = getattr(args, "archive", None) or getattr(args, "output", "")
        print(f"Error: {target}: {e}", file=sys.stderr)
        sys.exit(2)
    except ArgumentError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
