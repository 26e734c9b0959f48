from __future__ import annotations

import os

from .errors import ArgumentError


def norm_path(p: str) -> str:
    """Normalize archive paths to forward-slash separators.

    Only separators change; the path is otherwise stored as given.
    """
    return p.replace("\\", "/")


def safe_join(outdir: str, arc_path: str) -> str:
    """Resolve an archive path under ``outdir``.

    Rules:
    - Reject absolute paths and drive letters
    - Reject '..' segments
    - Drop empty and '.' segments
    """
    p = norm_path(arc_path)
    if p.startswith("/") or (len(p) > 1 and p[1] == ":"):
        raise ArgumentError(f"Absolute archive path not allowed: {arc_path!r}")
    parts = [q for q in p.split("/") if q not in ("", ".")]
    if not parts:
        raise ArgumentError(f"Empty archive path: {arc_path!r}")
    for q in parts:
        if q == "..":
            raise ArgumentError("Path may not contain '..'")
    return os.path.join(outdir, *parts)
