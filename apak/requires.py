"""Fail-fast argument checks for the public API.

All checks run before any file is opened so a bad call never leaves a
partially written archive behind.
"""

from __future__ import annotations

import os
from typing import Any

from .errors import ArgumentError


def not_none(value: Any, name: str) -> Any:
    if value is None:
        raise ArgumentError(f"{name} must not be None")
    return value


def not_empty_str(value: Any, name: str) -> str:
    not_none(value, name)
    if not isinstance(value, str):
        raise ArgumentError(f"{name} must be a string, got {type(value).__name__}")
    if not value:
        raise ArgumentError(f"{name} must not be empty")
    return value


def path_like(value: Any, name: str) -> str:
    """Accept str or os.PathLike; return a non-empty str path."""
    not_none(value, name)
    if isinstance(value, os.PathLike):
        value = os.fspath(value)
    if isinstance(value, bytes):
        raise ArgumentError(f"{name} must be a text path, not bytes")
    return not_empty_str(value, name)


def byte_buffer(value: Any, name: str) -> bytes:
    """Copy a bytes-like value into immutable bytes; empty buffers are allowed."""
    not_none(value, name)
    if isinstance(value, str):
        raise ArgumentError(f"{name} must be bytes-like; encode text first")
    try:
        return bytes(memoryview(value))
    except TypeError:
        raise ArgumentError(f"{name} must be bytes-like, got {type(value).__name__}") from None


def in_range(value: int, low: int, high: int, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ArgumentError(f"{name} must be an int")
    if value < low or value > high:
        raise ArgumentError(f"{name} must be within {low}..{high}, got {value}")
    return value
