"""
Application Identifier table for the GS1 decoder.

Holds the static set of GS1 Application Identifiers (AIs) the decoder knows
about, keyed by their 2, 3 or 4 character code.

Reference: https://www.gs1.org/standards/barcodes/application-identifiers
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple


@dataclass(frozen=True)
class IdentifierEntry:
    """
    A single GS1 Application Identifier.

    Attributes:
        code: The AI code (2-4 characters)
        purpose: Human-readable purpose label
        length: Length of the value that follows the code. For variable
            length AIs this is the maximum length.
        is_variable: True if the value length is variable
    """
    code: str
    purpose: str
    length: int
    is_variable: bool = False


# AI      Length  Flags   Purpose
RAW_IDENTIFIER_TABLE = """
00        18              SSCC-18
01        14              GTIN-14
02        14              GTIN-14
10        20      var     Batch
11        6               Production Date
12        6               Due Date
13        6               Packaging Date
15        6               Best Before Date
16        6               Sell By Date
17        6               Expiration Date
20        2               Variant
21        20      var     Serial Number
30        8       var     Item Count
37        8       var     Trade Item Count
91        20              USPS
253       30      var     GDTI
255       13              GCN
400       30      var     PO Number
"""

# Codes are tried shortest first
CODE_LENGTHS: Tuple[int, ...] = (2, 3, 4)


def _parse_raw_table(raw: str) -> Dict[str, IdentifierEntry]:
    """
    Parse the whitespace separated raw table.

    Each line is ``<code> <length> [var] <purpose...>``. Blank lines and
    lines starting with ``#`` are skipped.
    """
    entries: Dict[str, IdentifierEntry] = {}
    for line in raw.splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        parts = line.split()
        code, length = parts[0], int(parts[1])
        is_variable = len(parts) > 2 and parts[2] == 'var'
        purpose = ' '.join(parts[3:] if is_variable else parts[2:])

        if len(code) not in CODE_LENGTHS:
            raise ValueError(f"Invalid AI code length: {code!r}")

        entries[code] = IdentifierEntry(
            code=code,
            purpose=purpose,
            length=length,
            is_variable=is_variable,
        )
    return entries


class IdentifierTable:
    """
    Read-only lookup of AI code -> IdentifierEntry.
    """

    def __init__(self, entries: Optional[Dict[str, IdentifierEntry]] = None):
        self._entries: Dict[str, IdentifierEntry] = {}
        for code, entry in (entries or {}).items():
            if len(code) not in CODE_LENGTHS or code != entry.code:
                raise ValueError(f"Invalid AI entry for code {code!r}")
            self._entries[code] = entry

    def get(self, code: str) -> Optional[IdentifierEntry]:
        """Get entry by exact AI code."""
        return self._entries.get(code)

    def match(self, text: str) -> Optional[IdentifierEntry]:
        """
        Find the AI that prefixes ``text``.

        Tries the first 2, then 3, then 4 characters and returns the first
        hit, so a registered 2 character code shadows any longer code that
        starts with it.
        """
        for size in CODE_LENGTHS:
            if len(text) < size:
                break
            entry = self._entries.get(text[:size])
            if entry is not None:
                return entry
        return None

    def __contains__(self, code: str) -> bool:
        return code in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IdentifierEntry]:
        return iter(self._entries.values())

    def all_entries(self) -> Dict[str, IdentifierEntry]:
        """Return a copy of all entries."""
        return self._entries.copy()

    def to_json(self) -> str:
        """Export table to JSON."""
        data = {
            code: {
                'code': entry.code,
                'purpose': entry.purpose,
                'length': entry.length,
                'is_variable': entry.is_variable,
            }
            for code, entry in self._entries.items()
        }
        return json.dumps(data, indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> 'IdentifierTable':
        """Load table from JSON."""
        data = json.loads(json_str)
        entries = {}
        for code, info in data.items():
            entries[code] = IdentifierEntry(
                code=info.get('code', code),
                purpose=info.get('purpose', ''),
                length=int(info['length']),
                is_variable=info.get('is_variable', False),
            )
        return cls(entries)


# Global cached table instance
_cached_table: Optional[IdentifierTable] = None


def load_identifier_table(
    json_path: Optional[Path] = None,
    force_reload: bool = False
) -> IdentifierTable:
    """
    Load the identifier table, using cache when possible.

    Args:
        json_path: Optional path to a JSON table replacing the built-in one.
        force_reload: Force reload even if cached.

    Returns:
        IdentifierTable instance ready for use.
    """
    global _cached_table

    if _cached_table is not None and not force_reload and json_path is None:
        return _cached_table

    if json_path and json_path.exists():
        with open(json_path, 'r', encoding='utf-8') as f:
            _cached_table = IdentifierTable.from_json(f.read())
    else:
        _cached_table = APPLICATION_IDENTIFIERS

    return _cached_table


def save_identifier_table(table: IdentifierTable, json_path: Path) -> None:
    """Save identifier table to a JSON file."""
    with open(json_path, 'w', encoding='utf-8') as f:
        f.write(table.to_json())


# Built-in table, constant for the process lifetime
APPLICATION_IDENTIFIERS = IdentifierTable(_parse_raw_table(RAW_IDENTIFIER_TABLE))
