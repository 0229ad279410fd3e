"""
Example Scanner Script

Shows how to wire the keystroke Scanner to a GS1 decoder.

This script demonstrates:
1. Configuring a scanner that ends scans on a suffix key
2. Receiving decoded scans through on_scan and the "scan" event
3. Reporting keys typed into an excluded text field
4. Replaying a fast burst of keys in gap mode on a virtual clock
"""

import logging

from keyscan import (
    SCAN_EVENT,
    ManualScheduler,
    Scanner,
    format_payload_json,
    gs1_decoder,
)


def print_scan(values):
    print(format_payload_json(values.parsed, scanned=values.scanned))


def print_error(error):
    print(f"Ignored key {error.event.key!r}: {error.message}")


def suffix_example():
    print("=" * 60)
    print("Suffix key (Enter)")
    print("=" * 60)

    scanner = Scanner(
        suffix_keys=["Enter"],
        decoder=gs1_decoder(["Clear0029Clear", "F8"]),
        on_scan=print_scan,
        on_exception=print_error,
    )

    # Keys as a keyboard wedge reports them, Shift included
    keys = ["4", "0", "0", "0", "1", "3", "6", "8", "9", "6",
            "Shift", "G", "Shift", "D", "Shift", "M",
            "Clear0029Clear"]
    keys += list("0100681599063722")
    keys += ["F8", "3", "0", "1", "0", "Enter"]

    with scanner:
        scanner.feed("x", origin_kind="INPUT")
        for key in keys:
            scanner.feed(key)


def gap_example():
    print()
    print("=" * 60)
    print("Key gap (no prefix or suffix)")
    print("=" * 60)

    scheduler = ManualScheduler()
    scanner = Scanner(key_gap=40, decoder=gs1_decoder(["F8"]), scheduler=scheduler)
    scanner.events.add_listener(SCAN_EVENT, print_scan)

    # A person typing, then a scanner burst 5ms per key
    for key in "hi":
        scanner.feed(key, timestamp=scheduler.now())
        scheduler.advance(250)
    for key in "0100681599063722":
        scanner.feed(key, timestamp=scheduler.now())
        scheduler.advance(5)

    scheduler.run_all()
    scanner.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    suffix_example()
    gap_example()
