"""
APAK: single-file pack archives of named byte blobs.

Features:

- Entries are split into 1 MiB blocks; each block is raw-deflated and
  XOR-obfuscated independently.
- A trailing index records every block's offset, stored length and raw size;
  a fixed 12-byte footer locates the index.
- Loading validates header and footer signatures, the format version, and
  every block's bounds before any entry is returned.

Obfuscation only deters casual inspection; it is not encryption.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "archive",
    "writer",
    "reader",
    "codec",
    "errors",
]

# Programmatic API lives in apak.archive.Archive; apak.writer/apak.reader
# expose the streaming layer and apak.cli the command line.
