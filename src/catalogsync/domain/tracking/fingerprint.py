"""Deterministic fingerprints over tracked fields."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence

FIELD_SEPARATOR: Final[str] = "|"


def fingerprint(fields: Sequence[str | None]) -> str:
    """Return the SHA-256 hex digest of ``fields``.

    ``None`` and ``""`` hash identically. Every field is terminated by the
    separator, so field order matters and ``("a", "b")`` differs from ``("b", "a")``.
    """

    joined = "".join(f"{value or ''}{FIELD_SEPARATOR}" for value in fields)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()
