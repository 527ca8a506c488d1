"""Tests for hex parsing and the lighten transform in core/colors.py."""

import pytest

from core.colors import NEUTRAL_GRAY, lighten, normalize_hex, palette_color, parse_hex


def _channels(hex_color):
    return parse_hex(hex_color)


class TestParseHex:
    def test_six_digit_with_hash(self):
        assert parse_hex("#336699") == (0x33, 0x66, 0x99)

    def test_three_digit_doubles_each_digit(self):
        assert parse_hex("abc") == (0xAA, 0xBB, 0xCC)

    @pytest.mark.parametrize("value", ["", "#12", "#12345", "zzzzzz", None, 123, "#1234567"])
    def test_invalid_returns_none(self, value):
        assert parse_hex(value) is None

    def test_normalize_hex_falls_back_to_gray(self):
        assert normalize_hex("not-a-color") == NEUTRAL_GRAY
        assert normalize_hex("#ABC") == "#aabbcc"


class TestLighten:
    def test_zero_amount_returns_normalized_color(self):
        assert lighten("#336699", 0) == "#336699"
        assert lighten("ABC", 0) == "#aabbcc"

    def test_full_amount_is_white(self):
        assert lighten("#336699", 1) == "#ffffff"

    def test_half_rounds_half_up(self):
        """0 + 255 * 0.5 = 127.5 rounds to 128 (0x80)."""
        assert lighten("#000000", 0.5) == "#808080"

    def test_neutral_gray_for_invalid_input(self):
        assert lighten("nope", 0) == NEUTRAL_GRAY
        assert lighten(None, 0) == NEUTRAL_GRAY
        assert lighten("#64748b", 0.5) == "#b2bac5"

    def test_amount_is_clamped(self):
        assert lighten("#336699", 2) == "#ffffff"
        assert lighten("#336699", -1) == "#336699"
        assert lighten("#336699", "bogus") == "#336699"

    @pytest.mark.parametrize("base", ["#336699", "#000", "fff", "#d97706", "garbage"])
    def test_output_shape_and_monotonic_channels(self, base):
        previous = None
        for step in range(0, 21):
            out = lighten(base, step / 20)
            assert out.startswith("#") and len(out) == 7
            channels = _channels(out)
            assert channels is not None
            if previous is not None:
                assert all(c >= p for c, p in zip(channels, previous))
            previous = channels

    def test_deterministic(self):
        assert lighten("#2563eb", 0.35) == lighten("#2563eb", 0.35)


def test_palette_cycles():
    assert palette_color(0) == palette_color(8)
