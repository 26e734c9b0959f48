class ApakError(OSError):
    """Base class for archive format errors (an I/O error category)."""


class FormatError(ApakError):
    """Bad signature, version, or structurally malformed data."""


class BoundsError(ApakError):
    """A recorded offset or length points outside the archive file."""


class ArgumentError(ValueError):
    """Invalid argument passed to the public API; raised before any I/O."""
