"""
GS1 Element String Decoder for keyboard-wedge scans

Splits a raw scan into GS1 Application Identifier fields.

Rules applied:
- Function codes (FNC1 as typed by the scanner) separate groups of AIs
- Inside a group, AIs follow each other without separators
- Each AI consumes its code plus the length declared in the identifier
  table, variable-length AIs included (their length acts as a cap)
- Unknown data at the end of a group is dropped

References:
- https://www.gs1.org/docs/barcodes/GS1_DataMatrix_Guideline.pdf
- https://www.barcodefaq.com/barcode-properties/definitions/gs1-application-identifiers/

Example:
    >>> payload = decode_gs1(
    ...     "4000136896ShiftGShiftDShiftMClear0029Clear01006815990637223010",
    ...     ["Clear0029Clear"],
    ... )
    >>> payload["2D"]["gs1"]
    '(400)0136896GDM(01)00681599063722(30)10'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ..ai_table import APPLICATION_IDENTIFIERS, IdentifierTable
from ..words import SPECIAL_KEYS, erase_words

logger = logging.getLogger(__name__)

# Canonical group separator that function codes are rewritten to
GS_MARKER = "<GS>"

# FNC1 as typed by common wedge scanners: Alt+0029 on a keypad with NumLock
# off (reported as Clear around the digits), or a key remapped to F8
DEFAULT_FUNCTION_CODES = ("Clear0029Clear", "F8")


@dataclass(frozen=True)
class DecodedField:
    """An AI code and its value, in order of appearance."""
    ai: str
    value: str

    @property
    def element_string(self) -> str:
        """Bracketed representation, e.g. ``(01)00681599063722``."""
        return f"({self.ai}){self.value}"


def segment(text: str, table: Optional[IdentifierTable] = None) -> List[DecodedField]:
    """
    Split concatenated AI groups into fields.

    Each step looks up the AI prefixing the remaining text (2, then 3, then
    4 characters) and consumes the code plus the declared value length.
    Stops at the first position where no AI matches; whatever remains is
    dropped.

    Args:
        text: AI groups without separators, e.g. ``"0100681599063722" "3010"``
        table: Identifier table (default: built-in table)

    Returns:
        Fields in order of appearance.
    """
    table = table or APPLICATION_IDENTIFIERS
    fields: List[DecodedField] = []
    pos = 0

    while pos < len(text):
        remaining = text[pos:]
        entry = table.match(remaining)
        if entry is None:
            logger.debug("No AI matches %r, dropping trailing data", remaining)
            break

        code_len = len(entry.code)
        fields.append(DecodedField(
            ai=entry.code,
            value=remaining[code_len:code_len + entry.length],
        ))
        pos += code_len + entry.length

    return fields


def decode_gs1(
    raw: str,
    function_codes: Sequence[str],
    special_keys: Iterable[str] = SPECIAL_KEYS,
    table: Optional[IdentifierTable] = None,
) -> Optional[Dict[str, Any]]:
    """
    Decode a raw scan into a linear and, when possible, a GS1 payload.

    Args:
        raw: Raw scan as accumulated from key events
        function_codes: Key sequences acting as group separators
        special_keys: Key names to strip before decoding
        table: Identifier table (default: built-in table)

    Returns:
        ``{"1D": cleaned}`` when no AI was found,
        ``{"1D": cleaned, "2D": {"gs1": ..., <ai>: <value>, ...}}`` when
        at least one AI was found, or None when nothing is left after
        stripping special keys.
    """
    cleaned = erase_words(raw, special_keys)
    if not cleaned:
        return None

    separated = erase_words(cleaned, function_codes, GS_MARKER)

    fields: List[DecodedField] = []
    for group in separated.split(GS_MARKER):
        fields.extend(segment(group, table))

    if not fields:
        return {"1D": cleaned}

    structured: Dict[str, str] = {
        "gs1": "".join(f.element_string for f in fields),
    }
    for f in fields:
        structured[f.ai] = f.value

    logger.debug("Decoded %d GS1 fields from %r", len(fields), cleaned)
    return {"1D": cleaned, "2D": structured}


def gs1_decoder(
    function_codes: Sequence[str] = DEFAULT_FUNCTION_CODES,
    special_keys: Iterable[str] = SPECIAL_KEYS,
    table: Optional[IdentifierTable] = None,
) -> Callable[[str], Optional[Dict[str, Any]]]:
    """
    Build a one-argument decoder for ``ScannerOptions.decoder``.
    """
    function_codes = tuple(function_codes)
    special_keys = tuple(special_keys)

    def decoder(raw: str) -> Optional[Dict[str, Any]]:
        return decode_gs1(raw, function_codes, special_keys, table)

    return decoder
