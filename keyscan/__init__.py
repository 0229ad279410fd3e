"""
keyscan - keyboard-wedge barcode listener and GS1 decoder

Detects barcode scanner input in a stream of keystrokes (suffix key,
prefix key + timer, or inter-key gap) and decodes the completed scan,
either as plain linear data or as GS1 Application Identifier fields.
"""

from .ai_table import (
    APPLICATION_IDENTIFIERS,
    IdentifierEntry,
    IdentifierTable,
    load_identifier_table,
)
from .core.events import SCAN_EVENT, EventDispatcher
from .core.scanner import (
    ErrorCode,
    KeyEvent,
    Scanner,
    ScannerError,
    ScannerOptions,
    ScanValues,
    Strategy,
)
from .core.schedulers import AsyncioScheduler, ManualScheduler, ThreadingScheduler
from .decoders.basic import decode_basic
from .decoders.gs1 import (
    DEFAULT_FUNCTION_CODES,
    DecodedField,
    decode_gs1,
    gs1_decoder,
    segment,
)
from .formatters.json_formatter import describe_payload, format_payload_json
from .words import SPECIAL_KEYS, erase_words

__version__ = "1.0.0"
__all__ = [
    "Scanner",
    "ScannerOptions",
    "ScannerError",
    "ScanValues",
    "KeyEvent",
    "ErrorCode",
    "Strategy",
    "EventDispatcher",
    "SCAN_EVENT",
    "ThreadingScheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    "APPLICATION_IDENTIFIERS",
    "IdentifierEntry",
    "IdentifierTable",
    "load_identifier_table",
    "decode_basic",
    "decode_gs1",
    "gs1_decoder",
    "segment",
    "DecodedField",
    "DEFAULT_FUNCTION_CODES",
    "describe_payload",
    "format_payload_json",
    "SPECIAL_KEYS",
    "erase_words",
]
