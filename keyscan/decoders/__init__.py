"""
Decoders turning a raw scan into a payload.
"""

from .basic import decode_basic
from .gs1 import (
    DEFAULT_FUNCTION_CODES,
    GS_MARKER,
    DecodedField,
    decode_gs1,
    gs1_decoder,
    segment,
)

__all__ = [
    "decode_basic",
    "decode_gs1",
    "gs1_decoder",
    "segment",
    "DecodedField",
    "DEFAULT_FUNCTION_CODES",
    "GS_MARKER",
]
