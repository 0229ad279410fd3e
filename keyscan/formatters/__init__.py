"""
Output formatters for decoded scans.
"""

from .json_formatter import (
    describe_payload,
    field_name,
    format_payload_json,
)

__all__ = [
    "describe_payload",
    "field_name",
    "format_payload_json",
]
