"""Normalization of file identifiers reported by the editor."""

from __future__ import annotations

from typing import Optional


def normalize_fs_path(value: Optional[str]) -> Optional[str]:
    """Strip surrounding whitespace; empty identifiers become None.

    Paths are otherwise left untouched, so two spellings of the same file are
    two different identifiers.
    """
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None
