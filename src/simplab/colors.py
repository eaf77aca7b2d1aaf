"""Color helpers.

Mixing is a naive per-channel arithmetic mean in RGB space. It is not a
subtractive pigment model; two complementary colors average to grey rather
than to a dark mixture.
"""

from __future__ import annotations

import re
from typing import Sequence, Tuple

import numpy as np

from simplab.constants import NEUTRAL_COLOR

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")
_STRICT_HEX_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


def is_valid_hex(value: object) -> bool:
    """True for a "#rrggbb" string; the leading hash is required."""
    return isinstance(value, str) and _STRICT_HEX_PATTERN.match(value) is not None


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    match = _HEX_PATTERN.match(value)
    if match is None:
        raise ValueError(f"Invalid hex color: {value!r}")
    return tuple(int(channel, 16) for channel in match.groups())  # type: ignore[return-value]


def rgb_to_hex(red: int, green: int, blue: int) -> str:
    for channel in (red, green, blue):
        if not 0 <= channel <= 255:
            raise ValueError(f"RGB channel out of range: {channel}")
    return f"#{red:02x}{green:02x}{blue:02x}"


def mix_colors(colors: Sequence[str]) -> str:
    """Average a sequence of hex colors channel by channel.

    An empty sequence yields the neutral container color. A single color, or
    a run of identical colors, is returned unchanged.
    """
    if len(colors) == 0:
        return NEUTRAL_COLOR
    if len({color.lstrip("#").lower() for color in colors}) == 1:
        return colors[0]

    channels = np.array([hex_to_rgb(color) for color in colors], dtype=float)
    # Round half up, per channel.
    averaged = np.floor(channels.mean(axis=0) + 0.5).astype(int)
    return rgb_to_hex(*(int(value) for value in averaged))
