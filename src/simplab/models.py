"""Data structures for substances, reaction outcomes and history entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Category(str, Enum):
    ACID = "acid"
    WEAK_ACID = "weak-acid"
    BASE = "base"
    WEAK_BASE = "weak-base"
    SALT = "salt"
    OXIDIZER = "oxidizer"
    INDICATOR = "indicator"
    SOLVENT = "solvent"

    @property
    def is_acid(self) -> bool:
        return self in (Category.ACID, Category.WEAK_ACID)

    @property
    def is_base(self) -> bool:
        return self in (Category.BASE, Category.WEAK_BASE)


@dataclass(frozen=True)
class Substance:
    id: str
    name: str
    formula: str
    category: Category
    color: str
    concentration: str
    ph: float
    properties: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "formula": self.formula,
            "category": self.category.value,
            "color": self.color,
            "concentration": self.concentration,
            "pH": self.ph,
            "properties": list(self.properties),
        }


@dataclass(frozen=True)
class EffectDescriptor:
    """Physical effects asserted by a reaction rule."""

    heat: bool = False
    gas: bool = False
    precipitate: bool = False
    color_change: bool = False
    precipitate_color: Optional[str] = None
    final_color: Optional[str] = None


@dataclass(frozen=True)
class Reactant:
    id: str
    name: str
    formula: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "formula": self.formula}


@dataclass(frozen=True)
class Product:
    formula: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"formula": self.formula, "name": self.name}


@dataclass(frozen=True)
class EffectFlags:
    color_change: bool = False
    heat: bool = False
    gas: bool = False
    precipitate: bool = False

    @property
    def bubbles(self) -> bool:
        return self.gas

    @property
    def steam(self) -> bool:
        return self.heat

    def to_dict(self) -> Dict[str, bool]:
        return {
            "colorChange": self.color_change,
            "heat": self.heat,
            "gas": self.gas,
            "precipitate": self.precipitate,
            "bubbles": self.bubbles,
            "steam": self.steam,
        }


@dataclass(frozen=True)
class VisualData:
    """Everything a renderer needs to draw a container's liquid.

    Attributes:
        liquid_color: Resulting liquid color as ``#rrggbb``.
        precipitate_color: Color of the settled solid, or None.
        bubble_intensity: One of ``none``, ``medium``, ``high``.
        heat_level: One of ``normal``, ``warm``.
    """

    liquid_color: str
    precipitate_color: Optional[str] = None
    bubble_intensity: str = "none"
    heat_level: str = "normal"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "liquidColor": self.liquid_color,
            "precipitateColor": self.precipitate_color,
            "bubbleIntensity": self.bubble_intensity,
            "heatLevel": self.heat_level,
        }


@dataclass(frozen=True)
class ReactionResult:
    """Fully derived outcome of classifying a container's contents."""

    occurred: bool
    type: str
    description: str
    equation: str
    reactants: Tuple[Reactant, ...]
    products: Tuple[Product, ...]
    effects: EffectFlags
    visual_data: VisualData
    ph: float
    timestamp: int = field(default=0, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "occurred": self.occurred,
            "type": self.type,
            "description": self.description,
            "equation": self.equation,
            "reactants": [r.to_dict() for r in self.reactants],
            "products": [p.to_dict() for p in self.products],
            "effects": self.effects.to_dict(),
            "visualData": self.visual_data.to_dict(),
            "pH": self.ph,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class HistoryEntry:
    container_id: str
    timestamp: int  # ms since the epoch
    result: ReactionResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "containerId": self.container_id,
            "timestamp": self.timestamp,
            "result": self.result.to_dict(),
        }
