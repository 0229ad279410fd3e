"""
Tests for the scan decoders.

Tests cover:
- Key-name erasing
- AI segmentation against the identifier table
- GS1 decoding across function-code separated groups
- Basic (linear) decoding
"""

import pytest

from keyscan import (
    SPECIAL_KEYS,
    DecodedField,
    decode_basic,
    decode_gs1,
    erase_words,
    gs1_decoder,
    segment,
)
from keyscan.ai_table import IdentifierEntry, IdentifierTable
from keyscan.decoders import DEFAULT_FUNCTION_CODES


class TestEraseWords:
    """Tests for erase_words."""

    def test_no_marker_leaves_text_unchanged(self):
        """Text without any marker is returned as-is."""
        assert erase_words("0100681599063722", SPECIAL_KEYS) == "0100681599063722"

    def test_erases_every_occurrence(self):
        """All occurrences are removed, not only the first."""
        assert erase_words("ShiftAShiftBShiftC", ["Shift"]) == "ABC"

    def test_replacement(self):
        """Markers can be substituted instead of erased."""
        assert erase_words("a|b~c", ["|", "~"], "<GS>") == "a<GS>b<GS>c"

    def test_idempotent(self):
        """Erasing twice gives the same result as erasing once."""
        raw = "ShiftAEnterBTabC"
        once = erase_words(raw, SPECIAL_KEYS)
        assert erase_words(once, SPECIAL_KEYS) == once == "ABC"

    def test_order_matters_for_overlapping_markers(self):
        """A short marker applied first leaves the rest of a longer one."""
        assert erase_words("AltGraph", ["Alt", "AltGraph"]) == "Graph"
        assert erase_words("AltGraph", ["AltGraph", "Alt"]) == ""

    def test_default_special_keys_handle_altgraph(self):
        """The default key set lists AltGraph before Alt."""
        assert erase_words("1AltGraph2Alt3", SPECIAL_KEYS) == "123"

    def test_empty_marker_ignored(self):
        """Empty markers do not alter the text."""
        assert erase_words("ABC", ["", "X"]) == "ABC"


class TestSegment:
    """Tests for AI segmentation."""

    def test_single_fixed_length_ai(self):
        """GTIN consumes exactly 14 digits."""
        assert segment("0100681599063722") == [DecodedField("01", "00681599063722")]

    def test_three_digit_ai(self):
        """3-digit AI is found after the 2-digit lookup misses."""
        assert segment("4000136896GDM") == [DecodedField("400", "0136896GDM")]

    def test_concatenated_ais(self):
        """Fixed-length AI followed by another AI."""
        fields = segment("01006815990637223010")
        assert fields == [
            DecodedField("01", "00681599063722"),
            DecodedField("30", "10"),
        ]

    def test_variable_length_consumes_declared_maximum(self):
        """Variable-length AIs take up to their maximum, swallowing later AIs."""
        fields = segment("10ABC1725010121XYZ")
        assert fields == [DecodedField("10", "ABC1725010121XYZ")]

    def test_variable_length_capped(self):
        """A value longer than the cap continues as a new AI."""
        fields = segment("30123456781700")
        assert fields == [
            DecodedField("30", "12345678"),
            DecodedField("17", "00"),
        ]

    def test_unknown_trailing_data_dropped(self):
        """Segmentation stops silently at unknown data."""
        fields = segment("010068159906372299XYZ")
        assert fields == [DecodedField("01", "00681599063722")]

    def test_unknown_prefix(self):
        """No AI at the start means no fields."""
        assert segment("HELLO") == []

    def test_empty(self):
        """Empty text gives no fields."""
        assert segment("") == []

    def test_short_value_kept(self):
        """A value shorter than the declared length is kept as-is."""
        assert segment("17250") == [DecodedField("17", "250")]

    def test_two_digit_code_shadows_longer_code(self):
        """Shorter codes win even when a longer registered code matches."""
        table = IdentifierTable({
            "24": IdentifierEntry(code="24", purpose="Short", length=4),
            "240": IdentifierEntry(code="240", purpose="Long", length=10, is_variable=True),
        })
        fields = segment("2401234567890", table)
        assert fields == [DecodedField("24", "0123")]

    def test_calls_do_not_share_state(self):
        """Each call builds a fresh list."""
        first = segment("0100681599063722")
        second = segment("3010")
        assert first == [DecodedField("01", "00681599063722")]
        assert second == [DecodedField("30", "10")]

    def test_element_string(self):
        """Bracketed representation of a field."""
        assert DecodedField("01", "00681599063722").element_string == "(01)00681599063722"


class TestDecodeGS1:
    """Tests for the GS1 decoder."""

    def test_reference_example(self):
        """Groups separated by a function code decode into three AIs."""
        raw = "4000136896GDM<sep>0100681599063722<sep>3010"

        payload = decode_gs1(raw, ["<sep>"])

        assert payload == {
            "1D": raw,
            "2D": {
                "gs1": "(400)0136896GDM(01)00681599063722(30)10",
                "400": "0136896GDM",
                "01": "00681599063722",
                "30": "10",
            },
        }
        assert list(payload["2D"]) == ["gs1", "400", "01", "30"]

    def test_keyboard_wedge_input(self):
        """Shift keys are stripped and the default function codes apply."""
        raw = "4000136896ShiftGShiftDShiftMClear0029Clear01006815990637223010"

        payload = decode_gs1(raw, DEFAULT_FUNCTION_CODES)

        assert payload["1D"] == "4000136896GDMClear0029Clear01006815990637223010"
        assert payload["2D"]["gs1"] == "(400)0136896GDM(01)00681599063722(30)10"
        assert payload["2D"]["400"] == "0136896GDM"

    def test_f8_function_code(self):
        """F8 separates groups by default."""
        payload = decode_gs1("10LOT42F80100681599063722", DEFAULT_FUNCTION_CODES)

        assert payload["2D"] == {
            "gs1": "(10)LOT42(01)00681599063722",
            "10": "LOT42",
            "01": "00681599063722",
        }

    def test_no_ai_returns_linear_only(self):
        """Unstructured data only yields 1D."""
        assert decode_gs1("HELLO", ["<GS>"]) == {"1D": "HELLO"}

    def test_no_ai_linear_is_cleaned(self):
        """1D holds the string without special keys."""
        assert decode_gs1("ShiftHELLOEnter", ["<GS>"]) == {"1D": "HELLO"}

    @pytest.mark.parametrize("raw", ["", "Shift", "ShiftEnterTab"])
    def test_nothing_left(self, raw):
        """Empty input or special keys only decode to None."""
        assert decode_gs1(raw, ["<GS>"]) is None

    def test_repeated_ai_keeps_last_value(self):
        """A repeated AI appears twice in gs1 but once in the mapping."""
        payload = decode_gs1("1725010117250202", ["<GS>"])

        assert payload["2D"]["gs1"] == "(17)250101(17)250202"
        assert payload["2D"]["17"] == "250202"
        assert list(payload["2D"]) == ["gs1", "17"]

    def test_unknown_group_skipped(self):
        """A group with no AI contributes nothing but others still decode."""
        payload = decode_gs1("XYZ<GS>0100681599063722", ["<GS>"])

        assert payload["2D"] == {"gs1": "(01)00681599063722", "01": "00681599063722"}

    def test_custom_special_keys(self):
        """Caller supplied special keys replace the default set."""
        payload = decode_gs1("#0100681599063722#", ["<GS>"], special_keys=["#"])

        assert payload["1D"] == "0100681599063722"

    def test_custom_table(self):
        """Decoding with a caller supplied table."""
        table = IdentifierTable({
            "99": IdentifierEntry(code="99", purpose="Internal", length=3),
        })
        payload = decode_gs1("99ABC", ["<GS>"], table=table)

        assert payload["2D"] == {"gs1": "(99)ABC", "99": "ABC"}

    def test_decoder_factory(self):
        """gs1_decoder binds function codes into a one-argument decoder."""
        decoder = gs1_decoder(["|"])

        payload = decoder("10ABC|0100681599063722")

        assert payload["2D"]["10"] == "ABC"
        assert payload["2D"]["01"] == "00681599063722"


class TestDecodeBasic:
    """Tests for the basic decoder."""

    def test_strips_special_keys(self):
        """Suffix key names are removed from the linear payload."""
        assert decode_basic("ABCEnter") == {"1D": "ABC"}

    def test_digits_unchanged(self):
        """Plain data passes through."""
        assert decode_basic("0100681599063722") == {"1D": "0100681599063722"}

    @pytest.mark.parametrize("raw", ["", "Shift", "EnterEnter"])
    def test_nothing_left(self, raw):
        """Empty input or special keys only decode to None."""
        assert decode_basic(raw) is None

    def test_custom_special_keys(self):
        """Only the given keys are stripped."""
        assert decode_basic("ShiftA", special_keys=["A"]) == {"1D": "Shift"}
