"""
Scanner settings persistence and wiring.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, Optional

from .core.scanner import KeyEvent, ScannerError, ScannerOptions, ScanValues
from .decoders.basic import decode_basic
from .decoders.gs1 import DEFAULT_FUNCTION_CODES, gs1_decoder
from .storage import get_setting, record_scan, set_setting
from .words import SPECIAL_KEYS

logger = logging.getLogger(__name__)


DEFAULT_SETTINGS: Dict[str, Any] = {
    "timer": 100,
    "key_gap": 40,
    "prefix_keys": [],
    "suffix_keys": [],
    "exclude_listening_from_nodes": ["TEXTAREA", "INPUT"],
    "decoder": "gs1",  # gs1 or basic
    "function_codes": list(DEFAULT_FUNCTION_CODES),
    "special_keys": list(SPECIAL_KEYS),
    "record_scans": False,
    "source": "",
}

DECODERS = ("gs1", "basic")


def load_settings() -> Dict[str, Any]:
    settings = {}
    for key, default in DEFAULT_SETTINGS.items():
        settings[key] = get_setting(key, default)
    return settings


def save_settings(updates: Dict[str, Any]) -> None:
    unknown = set(updates) - set(DEFAULT_SETTINGS)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
    if "decoder" in updates and updates["decoder"] not in DECODERS:
        raise ValueError(f"Unknown decoder: {updates['decoder']!r}")
    for key, value in updates.items():
        set_setting(key, value)


def build_decoder(settings: Dict[str, Any]) -> Callable[[str], Optional[Dict[str, Any]]]:
    """Decoder named by ``settings["decoder"]``."""
    name = settings.get("decoder", DEFAULT_SETTINGS["decoder"])
    special_keys = tuple(settings.get("special_keys") or SPECIAL_KEYS)

    if name == "gs1":
        function_codes = settings.get("function_codes") or DEFAULT_FUNCTION_CODES
        return gs1_decoder(function_codes, special_keys)
    if name == "basic":
        return functools.partial(decode_basic, special_keys=special_keys)
    raise ValueError(f"Unknown decoder: {name!r}")


def build_options(
    settings: Optional[Dict[str, Any]] = None,
    *,
    on_scan: Optional[Callable[[ScanValues], None]] = None,
    on_exception: Optional[Callable[[ScannerError], None]] = None,
    on_key_detect: Optional[Callable[[str, KeyEvent], None]] = None,
) -> ScannerOptions:
    """
    Build ScannerOptions from settings.

    Args:
        settings: Settings dict; missing keys fall back to DEFAULT_SETTINGS.
            When None, settings are loaded from storage.
        on_scan: Scan callback. With ``record_scans`` on, every scan is
            stored before this is called. Storing is blocking file or
            MongoDB I/O run inside the scanner's flush, so with
            ``AsyncioScheduler`` it blocks the event loop; leave
            ``record_scans`` off there and store from ``on_scan`` with
            ``loop.run_in_executor`` instead.
        on_exception: Classification error callback
        on_key_detect: Accepted-key callback

    Returns:
        ScannerOptions ready for ``Scanner``.
    """
    merged = dict(DEFAULT_SETTINGS)
    merged.update(load_settings() if settings is None else settings)

    scan_callback = on_scan
    if merged["record_scans"]:
        source = merged.get("source") or None

        def record_and_forward(values: ScanValues) -> None:
            scan_id = record_scan(values, source=source)
            logger.debug("Recorded scan %s", scan_id)
            if on_scan:
                on_scan(values)

        scan_callback = record_and_forward

    return ScannerOptions(
        timer=merged["timer"],
        prefix_keys=merged["prefix_keys"],
        suffix_keys=merged["suffix_keys"],
        exclude_listening_from_nodes=merged["exclude_listening_from_nodes"],
        key_gap=merged["key_gap"],
        on_exception=on_exception,
        on_scan=scan_callback,
        on_key_detect=on_key_detect,
        decoder=build_decoder(merged),
    )
