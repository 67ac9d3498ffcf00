from __future__ import annotations

import fnmatch
import posixpath
import re
from typing import Tuple

"""
Path utilities used across the project.

All helpers are pure string functions: they never touch the filesystem.
Separators are unified to '/' first so behavior is the same on every OS.
Cache keys additionally fold case when asked to, for case-insensitive
filesystems.
"""

_DRIVE_RE = re.compile(r"^[A-Za-z]:/")


def to_posix(p: str) -> str:
    """Trim whitespace and convert backslashes to '/'."""
    return (p or "").strip().replace("\\", "/")


def is_absolute(p: str) -> bool:
    """True for POSIX absolute paths and Windows drive paths (C:/...)."""
    s = to_posix(p)
    return s.startswith("/") or bool(_DRIVE_RE.match(s))


def split_posix(p: str) -> Tuple[str, ...]:
    """Split a POSIX path into non-empty segments."""
    s = to_posix(p).strip("/")
    if not s:
        return tuple()
    return tuple(seg for seg in s.split("/") if seg)


def lexical_join(root: str, p: str) -> str:
    """Join p onto root and collapse '.' and '..' segments without I/O.

    Absolute p replaces root entirely, as os.path.join would.
    """
    s = to_posix(p)
    base = to_posix(root)
    joined = s if is_absolute(s) else f"{base.rstrip('/')}/{s}"
    return posixpath.normpath(joined)


def is_within_root(root: str, p: str) -> bool:
    """Return True if p, resolved lexically against root, stays under root."""
    base = posixpath.normpath(to_posix(root))
    target = lexical_join(base, p)
    if target == base:
        return True
    prefix = base if base.endswith("/") else base + "/"
    return target.startswith(prefix)


def cache_key(p: str, *, fold_case: bool) -> str:
    """Build the cache key for a path.

    Separators become '/', duplicate separators and '.' segments collapse,
    and the result is lower-cased when fold_case is set.
    """
    s = to_posix(p)
    if not s:
        return ""
    key = posixpath.normpath(s)
    return key.lower() if fold_case else key


def file_extension(p: str) -> str:
    """Lower-cased extension of the last path segment ('' if none).

    Dotfiles such as '.env' have no extension.
    """
    parts = split_posix(p)
    if not parts:
        return ""
    _, ext = posixpath.splitext(parts[-1])
    return ext.lower()


def normalize_extension(ext: str) -> str:
    """Canonical allow-list form: lower-case with one leading dot, or ''."""
    e = (ext or "").strip().lower()
    if not e:
        return ""
    return e if e.startswith(".") else f".{e}"


def glob_match(rel_path: str, pattern: str) -> bool:
    """Match a relative path against a glob pattern with '**' support."""
    parts = split_posix(rel_path)

    pat = to_posix(pattern).strip("/")
    if not pat:
        pat = "**/*"  # Default: match everything.
    pats = split_posix(pat)

    def rec(i: int, j: int) -> bool:
        if j == len(pats):
            return i == len(parts)

        token = pats[j]
        if token == "**":
            return rec(i, j + 1) or (i < len(parts) and rec(i + 1, j))

        return (
            i < len(parts)
            and fnmatch.fnmatchcase(parts[i], token)
            and rec(i + 1, j + 1)
        )

    return rec(0, 0)
