"""
Unstructured decoder: strips non-data keys and returns the linear payload.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from ..words import SPECIAL_KEYS, erase_words


def decode_basic(
    raw: str,
    special_keys: Iterable[str] = SPECIAL_KEYS
) -> Optional[Dict[str, Any]]:
    """
    Decode a raw scan into ``{"1D": <cleaned>}``.

    Returns:
        The payload, or None when nothing is left after cleaning.
    """
    cleaned = erase_words(raw, special_keys)
    if not cleaned:
        return None
    return {"1D": cleaned}
