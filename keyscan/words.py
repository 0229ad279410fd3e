"""
Key-name erasing helpers.

Keyboard-wedge scanners deliver non-printing keys (Shift, Enter, ...) as key
names inside the raw scan. These helpers strip or substitute them.
"""

from __future__ import annotations

from typing import Iterable, Tuple


# Names of keys that carry no barcode data. Longer names come before the
# shorter names they contain ("AltGraph" before "Alt").
SPECIAL_KEYS: Tuple[str, ...] = (
    "Shift",
    "Control",
    "AltGraph",
    "Alt",
    "CapsLock",
    "NumLock",
    "ScrollLock",
    "Meta",
    "Enter",
    "Tab",
    "Escape",
    "Backspace",
    "Unidentified",
)


def erase_words(text: str, words: Iterable[str], replacement: str = "") -> str:
    """
    Replace every occurrence of each word in ``text``.

    Words are applied in the given order, each one fully before the next.

    Args:
        text: Input string
        words: Words to replace
        replacement: Substitute for each occurrence (default: erase)

    Returns:
        New string, unchanged if no word occurs in ``text``.
    """
    result = text
    for word in words:
        if word:
            result = result.replace(word, replacement)
    return result
