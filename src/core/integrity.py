"""Content fingerprints for cache integrity checks.

Stateless helpers: SHA-256 over the UTF-8 bytes of the content.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Optional, Union

from core.errors import IntegrityMismatchError

Content = Union[str, bytes]


def _as_bytes(content: Content) -> bytes:
    if isinstance(content, bytes):
        return content
    if isinstance(content, str):
        return content.encode("utf-8")
    raise TypeError(f"Cannot fingerprint {type(content).__name__}; expected str or bytes")


def fingerprint(content: Content) -> str:
    """Return the hex SHA-256 digest of content."""
    return hashlib.sha256(_as_bytes(content)).hexdigest()


def verify(content: Content, expected: str) -> bool:
    """Recompute the fingerprint of content and compare it to expected."""
    return hmac.compare_digest(fingerprint(content), expected)


def ensure_intact(content: Content, expected: str, *, path: Optional[str] = None) -> None:
    """Raise IntegrityMismatchError if content no longer matches expected."""
    actual = fingerprint(content)
    if not hmac.compare_digest(actual, expected):
        raise IntegrityMismatchError(
            f"Fingerprint mismatch: expected {expected}, got {actual}",
            path=path,
        )
