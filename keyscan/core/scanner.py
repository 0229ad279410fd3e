"""
Keystroke Scanner

Tells keyboard-wedge barcode scanner input apart from human typing and
hands every completed scan to a decoder.

A scanner types much faster than a person and can usually be configured to
send a prefix and/or a suffix key around the data. Completion of a scan is
detected with exactly one of three strategies, chosen from the options in
this order:

- SUFFIX: a suffix key ends the scan immediately
- PREFIX: a prefix key starts a timer; the scan ends when it expires
- GAP: keys arriving less than ``key_gap`` ms apart are a scan; it ends
  once no key has arrived for ``key_gap`` ms

Key events coming from excluded origins (text inputs by default) are
reported through ``on_exception`` and otherwise ignored.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..decoders.basic import decode_basic
from .events import SCAN_EVENT, EventDispatcher
from .schedulers import ThreadingScheduler

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Classification error codes."""
    EXCLUDED_NODE = "EXCLUDED_NODE"


class Strategy(str, Enum):
    """Scan completion strategy."""
    SUFFIX = "suffix"
    PREFIX = "prefix"
    GAP = "gap"


@dataclass
class KeyEvent:
    """
    One keystroke.

    Attributes:
        key: Key name as reported by the keyboard layer ("A", "Shift", ...)
        timestamp: Time of the keystroke in milliseconds
        origin_kind: Kind of node the event came from ("INPUT", ...)
        raw: Original event object from the caller, if any
    """
    key: str
    timestamp: float
    origin_kind: str = ""
    raw: Any = None


@dataclass
class ScannerError:
    """Non-fatal classification error passed to ``on_exception``."""
    message: str
    code: ErrorCode
    event: Optional[KeyEvent] = None


@dataclass
class ScanValues:
    """
    A completed scan.

    Attributes:
        parsed: Payload returned by the decoder
        scanned: Raw key sequence the payload was decoded from
    """
    parsed: Dict[str, Any]
    scanned: str

    def to_dict(self) -> Dict[str, Any]:
        return {'parsed': self.parsed, 'scanned': self.scanned}


@dataclass(frozen=True)
class ScannerOptions:
    """
    Scanner configuration. Immutable; change it with ``Scanner.set_options``.

    Attributes:
        timer: Milliseconds after a prefix key at which the scan is
            considered done. Only used with prefix keys.
        prefix_keys: Keys the scanner sends before the data
        suffix_keys: Keys the scanner sends after the data. When set,
            prefix keys and key gap are ignored.
        exclude_listening_from_nodes: Origin kinds whose events are ignored
        key_gap: Maximum milliseconds between two keys of the same scan
        on_exception: Called with a ScannerError for ignored events
        on_scan: Called with ScanValues for every decoded scan
        on_key_detect: Called with (key, KeyEvent) for every accepted key
        decoder: Turns the raw scan into a payload (default: decode_basic)
    """
    timer: float = 100
    prefix_keys: Sequence[str] = ()
    suffix_keys: Sequence[str] = ()
    exclude_listening_from_nodes: Sequence[str] = ("TEXTAREA", "INPUT")
    key_gap: float = 40
    on_exception: Optional[Callable[[ScannerError], None]] = field(default=None, repr=False)
    on_scan: Optional[Callable[[ScanValues], None]] = field(default=None, repr=False)
    on_key_detect: Optional[Callable[[str, KeyEvent], None]] = field(default=None, repr=False)
    decoder: Optional[Callable[[str], Optional[Dict[str, Any]]]] = field(default=None, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'prefix_keys', tuple(self.prefix_keys or ()))
        object.__setattr__(self, 'suffix_keys', tuple(self.suffix_keys or ()))
        object.__setattr__(
            self, 'exclude_listening_from_nodes', tuple(self.exclude_listening_from_nodes or ())
        )
        if self.timer < 0:
            raise ValueError(f"timer must be >= 0, got {self.timer}")
        if self.key_gap < 0:
            raise ValueError(f"key_gap must be >= 0, got {self.key_gap}")

    @property
    def strategy(self) -> Strategy:
        """Completion strategy implied by these options."""
        if self.suffix_keys:
            return Strategy.SUFFIX
        if self.prefix_keys:
            return Strategy.PREFIX
        return Strategy.GAP


class Scanner:
    """
    Accumulates keystrokes and emits decoded scans.

    Feed every keystroke with ``feed``. Completed scans are passed to
    ``options.on_scan`` and dispatched as a ``"scan"`` event on
    ``self.events``. Call ``close`` when done so pending timers cannot
    fire afterwards.

    Example:
        >>> scanner = Scanner(suffix_keys=["Enter"], on_scan=print)
        >>> scanner.simulate_scan("12345")
        >>> scanner.feed("Enter")
        ScanValues(parsed={'1D': '12345'}, scanned='12345Enter')
    """

    def __init__(
        self,
        options: Optional[ScannerOptions] = None,
        *,
        scheduler=None,
        dispatcher: Optional[EventDispatcher] = None,
        **changes: Any,
    ):
        options = options or ScannerOptions()
        self._options = replace(options, **changes) if changes else options
        self._strategy = self._options.strategy

        self.scheduler = scheduler or ThreadingScheduler()
        self.events = dispatcher or EventDispatcher()

        self._lock = threading.RLock()
        self._keys: List[str] = []
        self._previous_timestamp: Optional[float] = None
        self._tokens = itertools.count(1)

        self._reading = False
        self._prefix_timer = None
        self._prefix_token: Optional[int] = None
        self._gap_timer = None
        self._gap_token: Optional[int] = None

        self._closed = False

    @property
    def options(self) -> ScannerOptions:
        return self._options

    @property
    def strategy(self) -> Strategy:
        return self._strategy

    @property
    def buffer(self) -> str:
        """Keys accumulated since the last flush."""
        with self._lock:
            return "".join(self._keys)

    @property
    def closed(self) -> bool:
        return self._closed

    def set_options(self, options: Optional[ScannerOptions] = None, **changes: Any) -> None:
        """
        Replace or update the options.

        Unnamed options keep their current value. Takes effect with the
        next keystroke.
        """
        with self._lock:
            base = options if options is not None else self._options
            self._options = replace(base, **changes) if changes else base
            self._strategy = self._options.strategy
            logger.debug("Scanner options updated, strategy=%s", self._strategy.value)

    def feed(
        self,
        key: str,
        timestamp: Optional[float] = None,
        origin_kind: str = "",
        event: Any = None,
    ) -> None:
        """
        Process one keystroke.

        Args:
            key: Key name
            timestamp: Keystroke time in milliseconds (default: scheduler clock)
            origin_kind: Kind of node the event came from
            event: Caller's original event object, passed back in callbacks
        """
        with self._lock:
            if self._closed:
                logger.warning("Ignoring key %r fed to a closed scanner", key)
                return

            options = self._options
            if timestamp is None:
                timestamp = self.scheduler.now()
            key_event = KeyEvent(key=key, timestamp=timestamp, origin_kind=origin_kind or "", raw=event)

            if key_event.origin_kind in options.exclude_listening_from_nodes:
                self._handle_exception(ScannerError(
                    message="Event is from excluded nodes",
                    code=ErrorCode.EXCLUDED_NODE,
                    event=key_event,
                ))
                return

            self._keys.append(key)
            if options.on_key_detect:
                options.on_key_detect(key, key_event)

            if self._strategy is Strategy.SUFFIX:
                if key in options.suffix_keys:
                    self._flush()
            elif self._strategy is Strategy.PREFIX:
                if key in options.prefix_keys:
                    self._arm_prefix_timer()
            else:
                self._track_gap(key, timestamp)

    def simulate_scan(self, text: str) -> None:
        """Feed every character of ``text`` as a keystroke."""
        for char in text:
            self.feed(char)

    def flush(self) -> Optional[ScanValues]:
        """Decode and emit the current buffer now."""
        with self._lock:
            return self._flush()

    def close(self) -> None:
        """Cancel pending timers and drop buffered keys."""
        with self._lock:
            self._cancel_gap_timer()
            if self._prefix_timer is not None:
                self._prefix_timer.cancel()
            self._prefix_timer = None
            self._prefix_token = None
            self._reading = False
            self._keys = []
            self._previous_timestamp = None
            self._closed = True
        logger.debug("Scanner closed")

    def __enter__(self) -> 'Scanner':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _track_gap(self, key: str, timestamp: float) -> None:
        previous = self._previous_timestamp
        gap = timestamp - previous if previous is not None else -1

        if previous is not None and gap >= self._options.key_gap:
            # Too slow for a scanner: start a new accumulation at this key.
            # A burst whose timer has not fired yet is emitted first.
            if self._gap_timer is not None:
                self._keys.pop()
                self._flush()
            logger.debug("Key gap %.1fms, restarting scan at %r", gap, key)
            self._keys = [key]
        elif 0 <= gap < self._options.key_gap:
            self._arm_gap_timer()

        self._previous_timestamp = timestamp

    def _arm_gap_timer(self) -> None:
        self._cancel_gap_timer()
        token = next(self._tokens)
        self._gap_token = token
        self._gap_timer = self.scheduler.call_later(
            self._options.key_gap, lambda: self._on_gap_timer(token)
        )

    def _cancel_gap_timer(self) -> None:
        if self._gap_timer is not None:
            self._gap_timer.cancel()
        self._gap_timer = None
        self._gap_token = None

    def _on_gap_timer(self, token: int) -> None:
        with self._lock:
            if token != self._gap_token:
                return
            self._gap_timer = None
            self._gap_token = None
            self._flush()

    def _arm_prefix_timer(self) -> None:
        if self._reading:
            return
        self._reading = True
        token = next(self._tokens)
        self._prefix_token = token
        self._prefix_timer = self.scheduler.call_later(
            self._options.timer, lambda: self._on_prefix_timer(token)
        )

    def _on_prefix_timer(self, token: int) -> None:
        with self._lock:
            if token != self._prefix_token:
                return
            self._prefix_timer = None
            self._prefix_token = None
            try:
                self._flush()
            finally:
                self._reading = False

    def _flush(self) -> Optional[ScanValues]:
        scanned = "".join(self._keys)
        self._keys = []
        self._previous_timestamp = None
        self._cancel_gap_timer()

        decoder = self._options.decoder or decode_basic
        parsed = decoder(scanned)
        if not parsed:
            logger.debug("Nothing decoded from %r", scanned)
            return None

        values = ScanValues(parsed=parsed, scanned=scanned)
        logger.info("Scan detected: %r", scanned)
        self.events.dispatch(SCAN_EVENT, values)
        if self._options.on_scan:
            self._options.on_scan(values)
        return values

    def _handle_exception(self, error: ScannerError) -> None:
        logger.debug("%s: %s", error.code.value, error.message)
        if self._options.on_exception:
            self._options.on_exception(error)
