"""Drawing primitives for a container, derived only from its visual data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from simplab.colors import hex_to_rgb
from simplab.models import VisualData

BUBBLE_COUNTS = {"none": 0, "medium": 8, "high": 20}

# Liquid occupies at most this share of the drawn beaker height.
LIQUID_HEIGHT_SCALE = 0.8
PRECIPITATE_HEIGHT = 0.06


@dataclass(frozen=True)
class BeakerDrawing:
    liquid_rgb: Tuple[float, float, float]
    liquid_height: float
    precipitate_rgb: Optional[Tuple[float, float, float]]
    precipitate_height: float
    bubble_count: int
    warm: bool


def _unit_rgb(color: str) -> Tuple[float, float, float]:
    red, green, blue = hex_to_rgb(color)
    return (red / 255.0, green / 255.0, blue / 255.0)


def beaker_drawing(visual_data: VisualData, fill_level: float) -> BeakerDrawing:
    precipitate_rgb = (
        _unit_rgb(visual_data.precipitate_color)
        if visual_data.precipitate_color
        else None
    )
    return BeakerDrawing(
        liquid_rgb=_unit_rgb(visual_data.liquid_color),
        liquid_height=fill_level * LIQUID_HEIGHT_SCALE,
        precipitate_rgb=precipitate_rgb,
        precipitate_height=PRECIPITATE_HEIGHT if precipitate_rgb else 0.0,
        bubble_count=BUBBLE_COUNTS.get(visual_data.bubble_intensity, 0),
        warm=visual_data.heat_level == "warm",
    )
