"""
Keystroke classification for keyboard-wedge barcode scanners.
"""

from .events import SCAN_EVENT, EventDispatcher
from .scanner import (
    ErrorCode,
    KeyEvent,
    Scanner,
    ScannerError,
    ScannerOptions,
    ScanValues,
    Strategy,
)
from .schedulers import AsyncioScheduler, ManualScheduler, ThreadingScheduler

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
]
