from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Tuple

NEUTRAL_GRAY = "#64748b"
BARRIER_LIGHTEN = 0.35

# Tailwind 600-series, cycled for themes that ship without a color.
PALETTE = (
    "#2563eb",
    "#16a34a",
    "#d97706",
    "#dc2626",
    "#7c3aed",
    "#0891b2",
    "#db2777",
    "#65a30d",
)

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def parse_hex(value: object) -> Optional[Tuple[int, int, int]]:
    """Parse `#rgb` / `#rrggbb` (hash optional) into an RGB tuple, or None."""
    if not isinstance(value, str):
        return None
    match = _HEX_RE.match(value.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def to_hex(rgb: Tuple[int, int, int]) -> str:
    return "#" + "".join(f"{max(0, min(255, int(c))):02x}" for c in rgb)


def normalize_hex(value: object, default: str = NEUTRAL_GRAY) -> str:
    rgb = parse_hex(value)
    if rgb is None:
        rgb = parse_hex(default) or parse_hex(NEUTRAL_GRAY)
    return to_hex(rgb)


def _clamp_amount(amount: object) -> float:
    try:
        out = float(amount)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if out != out:  # NaN
        return 0.0
    return max(0.0, min(1.0, out))


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def lighten(hex_color: object, amount: object) -> str:
    """Move each channel toward 255 by `amount` (0..1) and return `#rrggbb`.

    Unparseable input is treated as the neutral gray.
    """
    rgb = parse_hex(hex_color) or parse_hex(NEUTRAL_GRAY)
    frac = _clamp_amount(amount)
    return to_hex(tuple(_round_half_up(c + (255 - c) * frac) for c in rgb))  # type: ignore[arg-type]


def palette_color(index: int) -> str:
    return PALETTE[index % len(PALETTE)]
