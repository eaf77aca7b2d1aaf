"""Substance catalog.

The catalog is a read-only mapping from substance identifier to
:class:`~simplab.models.Substance`. Entries are validated when the catalog is
built, so classification never has to deal with malformed data.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping, Optional

from simplab.colors import is_valid_hex
from simplab.constants import PH_MAX, PH_MIN
from simplab.errors import CatalogError, SubstanceNotFoundError
from simplab.models import Category, Substance

logger = logging.getLogger(__name__)


def validate_substance(substance: Substance) -> None:
    """Raise :class:`CatalogError` if a substance violates catalog invariants."""
    if not substance.id:
        raise CatalogError("Substance identifier must be non-empty")
    if not isinstance(substance.category, Category):
        raise CatalogError(f"{substance.id}: unknown category {substance.category!r}")
    if not is_valid_hex(substance.color):
        raise CatalogError(f"{substance.id}: invalid color {substance.color!r}")
    if not PH_MIN <= substance.ph <= PH_MAX:
        raise CatalogError(
            f"{substance.id}: pH {substance.ph} outside [{PH_MIN}, {PH_MAX}]"
        )


class SubstanceCatalog:
    """Immutable collection of substances keyed by identifier."""

    def __init__(self, substances: Iterable[Substance]):
        entries: dict[str, Substance] = {}
        for substance in substances:
            validate_substance(substance)
            if substance.id in entries:
                raise CatalogError(f"Duplicate substance identifier: {substance.id}")
            entries[substance.id] = substance
        self._entries = entries

    def lookup(self, substance_id: str) -> Substance:
        try:
            return self._entries[substance_id]
        except KeyError:
            raise SubstanceNotFoundError(substance_id) from None

    def get(self, substance_id: str) -> Optional[Substance]:
        return self._entries.get(substance_id)

    def ids(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def extended(self, substances: Iterable[Substance]) -> "SubstanceCatalog":
        """Return a new catalog with extra (or replacing) entries."""
        merged = dict(self._entries)
        for substance in substances:
            merged[substance.id] = substance
        return SubstanceCatalog(merged.values())

    def __contains__(self, substance_id: object) -> bool:
        return substance_id in self._entries

    def __iter__(self) -> Iterator[Substance]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


def substance_from_mapping(substance_id: str, data: Mapping[str, Any]) -> Substance:
    """Build a substance from a JSON-style mapping.

    Expected keys: ``name``, ``formula``, ``category``, ``color``,
    ``concentration``, ``pH`` and optionally ``properties``.
    """
    if not isinstance(data, Mapping):
        raise CatalogError(f"{substance_id}: entry must be a mapping, not {type(data).__name__}")

    try:
        category = Category(data["category"])
    except ValueError:
        raise CatalogError(
            f"{substance_id}: unknown category {data['category']!r}"
        ) from None
    except KeyError as exc:
        raise CatalogError(f"{substance_id}: missing field {exc.args[0]!r}") from None

    try:
        substance = Substance(
            id=substance_id,
            name=str(data["name"]),
            formula=str(data.get("formula", substance_id)),
            category=category,
            color=data["color"],
            concentration=str(data.get("concentration", "")),
            ph=float(data["pH"]),
            properties=tuple(data.get("properties", ())),
        )
    except KeyError as exc:
        raise CatalogError(f"{substance_id}: missing field {exc.args[0]!r}") from None
    except (TypeError, ValueError) as exc:
        raise CatalogError(f"{substance_id}: {exc}") from None

    validate_substance(substance)
    return substance


def catalog_from_mapping(
    data: Mapping[str, Mapping[str, Any]],
    base: Optional[SubstanceCatalog] = None,
) -> SubstanceCatalog:
    """Build a catalog from ``{id: {...}}``, optionally extending ``base``."""
    if not isinstance(data, Mapping):
        raise CatalogError(f"catalog must be a mapping of substance ids, not {type(data).__name__}")
    substances = [substance_from_mapping(sid, entry) for sid, entry in data.items()]
    if base is None:
        return SubstanceCatalog(substances)
    catalog = base.extended(substances)
    logger.debug("Extended catalog with %d substances", len(substances))
    return catalog


_BUILTIN_SUBSTANCES = (
    # Acids
    Substance("HCl", "Hydrochloric Acid", "HCl", Category.ACID, "#E8F4F8", "1M", 1,
              ("strong acid", "corrosive")),
    Substance("H2SO4", "Sulfuric Acid", "H₂SO₄", Category.ACID, "#F0F0F0", "1M", 1,
              ("strong acid", "dehydrating agent")),
    Substance("HNO3", "Nitric Acid", "HNO₃", Category.ACID, "#FFFFCC", "1M", 1,
              ("strong acid", "oxidizing agent")),
    Substance("CH3COOH", "Acetic Acid", "CH₃COOH", Category.WEAK_ACID, "#FAFAFA", "1M", 3,
              ("weak acid", "vinegar")),
    # Bases
    Substance("NaOH", "Sodium Hydroxide", "NaOH", Category.BASE, "#F5F5F5", "1M", 14,
              ("strong base", "caustic")),
    Substance("KOH", "Potassium Hydroxide", "KOH", Category.BASE, "#F8F8F8", "1M", 14,
              ("strong base", "caustic")),
    Substance("NH3", "Ammonia", "NH₃", Category.WEAK_BASE, "#F0FFFF", "1M", 11,
              ("weak base", "pungent odor")),
    # Salts
    Substance("NaCl", "Sodium Chloride", "NaCl", Category.SALT, "#FFFFFF", "1M", 7,
              ("neutral salt", "soluble")),
    Substance("AgNO3", "Silver Nitrate", "AgNO₃", Category.SALT, "#F8F8FF", "0.1M", 7,
              ("oxidizing agent", "light sensitive")),
    Substance("CuSO4", "Copper(II) Sulfate", "CuSO₄", Category.SALT, "#1E90FF", "1M", 5,
              ("blue solution", "toxic")),
    Substance("FeCl3", "Iron(III) Chloride", "FeCl₃", Category.SALT, "#CD853F", "0.5M", 2,
              ("brown solution", "acidic")),
    # Oxidizers
    Substance("KMnO4", "Potassium Permanganate", "KMnO₄", Category.OXIDIZER, "#8B008B",
              "0.1M", 7, ("strong oxidizer", "purple color")),
    Substance("H2O2", "Hydrogen Peroxide", "H₂O₂", Category.OXIDIZER, "#F0FFFF", "3%", 6,
              ("oxidizing agent", "bleaching")),
    # Indicators
    Substance("Phenolphthalein", "Phenolphthalein", "C₂₀H₁₄O₄", Category.INDICATOR,
              "#FFFFFF", "0.01M", 7, ("pH indicator", "colorless in acid, pink in base")),
    # Solvents
    Substance("H2O", "Water", "H₂O", Category.SOLVENT, "#E8F4F8", "pure", 7,
              ("universal solvent", "neutral")),
)

DEFAULT_CATALOG = SubstanceCatalog(_BUILTIN_SUBSTANCES)


def lookup(substance_id: str) -> Substance:
    """Look up a substance in the built-in catalog."""
    return DEFAULT_CATALOG.lookup(substance_id)
