"""
JSON Formatter for decoded scans

Turns decoder payloads into flat, human-readable JSON:
- Linear data under "Barcode"
- Bracketed GS1 element string under "GS1"
- One entry per AI, named after the identifier's purpose
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ..ai_table import APPLICATION_IDENTIFIERS, IdentifierTable


def field_name(ai: str, table: Optional[IdentifierTable] = None) -> str:
    """Human-readable name for an AI code, e.g. ``"GTIN-14"``."""
    entry = (table or APPLICATION_IDENTIFIERS).get(ai)
    return entry.purpose if entry else f"AI({ai})"


def describe_payload(
    payload: Optional[Dict[str, Any]],
    table: Optional[IdentifierTable] = None
) -> Dict[str, str]:
    """
    Flatten a decoder payload into name -> value.

    AIs sharing a purpose label (01 and 02 are both GTIN-14) get the code
    appended to keep names unique.

    Example:
        >>> describe_payload({"1D": "0100681599063722",
        ...                   "2D": {"gs1": "(01)00681599063722",
        ...                          "01": "00681599063722"}})
        {'Barcode': '0100681599063722', 'GS1': '(01)00681599063722', 'GTIN-14': '00681599063722'}
    """
    output: Dict[str, str] = {}
    if not payload:
        return output

    if "1D" in payload:
        output["Barcode"] = payload["1D"]

    structured = payload.get("2D") or {}
    for key, value in structured.items():
        if key == "gs1":
            output["GS1"] = value
            continue
        name = field_name(key, table)
        if name in output:
            name = f"{name} ({key})"
        output[name] = value

    return output


def format_payload_json(
    payload: Optional[Dict[str, Any]],
    scanned: Optional[str] = None,
    raw_payload: bool = False,
    table: Optional[IdentifierTable] = None,
    indent: int = 2
) -> str:
    """
    Format a payload as JSON.

    Args:
        payload: Decoder payload (may be None)
        scanned: Raw key sequence to include under "Scanned"
        raw_payload: Emit the payload structure as-is instead of
            human-readable names
        table: Identifier table used for names
        indent: JSON indentation

    Returns:
        JSON string.
    """
    if raw_payload:
        output: Dict[str, Any] = dict(payload or {})
    else:
        output = dict(describe_payload(payload, table))

    if scanned is not None:
        output["Scanned"] = scanned

    return json.dumps(output, indent=indent, ensure_ascii=False)
