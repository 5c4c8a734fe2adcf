"""Helpers for validating user-supplied relative paths."""

from __future__ import annotations

import os

__all__ = ["clean_relative_path", "is_within_dir"]


def _has_windows_drive_prefix(path: str) -> bool:
    if len(path) < 2 or path[1] != ":":
        return False
    first = path[0]
    if not ("A" <= first <= "Z" or "a" <= first <= "z"):
        return False
    # "a:b" is a legal relative name on POSIX; a real drive prefix is followed
    # by a separator or nothing at all.
    return len(path) == 2 or path[2] in "/\\"


def _is_absolute_or_volume(path: str) -> bool:
    return os.path.isabs(path) or os.path.splitdrive(path)[0] != ""


def clean_relative_path(rel: str) -> str:
    """Return a clean native relative path.

    Raises ValueError for absolute, drive-relative or parent-escaping paths.
    An empty or current-directory path yields an empty string.
    """
    original = rel
    rel = rel.strip()
    if not rel:
        return ""
    slash_raw = rel.replace(os.sep, "/").replace("\\", "/")
    native_raw = slash_raw.replace("/", os.sep)
    if (
        _is_absolute_or_volume(native_raw)
        or _has_windows_drive_prefix(slash_raw)
        or slash_raw.startswith("/")
    ):
        raise ValueError(f"absolute path not allowed: {original}")
    if slash_raw.startswith("./"):
        slash_raw = slash_raw[2:]
    clean = os.path.normpath(slash_raw.replace("/", os.sep))
    if clean == ".":
        return ""
    if (
        _is_absolute_or_volume(clean)
        or clean == ".."
        or clean.startswith(".." + os.sep)
    ):
        raise ValueError(f"path escapes allowed directory: {original}")
    return clean


def is_within_dir(root: str | os.PathLike[str], path: str | os.PathLike[str]) -> bool:
    """Report whether ``path`` resolves inside ``root``."""
    try:
        root_abs = os.path.normpath(os.path.abspath(root))
        path_abs = os.path.normpath(os.path.abspath(path))
        rel = os.path.relpath(path_abs, root_abs)
    except (OSError, ValueError):
        return False
    if rel == ".":
        return True
    return not os.path.isabs(rel) and rel != ".." and not rel.startswith(".." + os.sep)