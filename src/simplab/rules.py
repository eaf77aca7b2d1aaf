"""Reaction rules and the patterns they match against.

Rules are plain data evaluated in a fixed precedence order: the first rule
whose pattern matches the set of present substances wins. Adding a reaction
means adding a rule (and its product table entry), not a new branch in the
classifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Iterator, Mapping, Optional, Protocol, Sequence, Tuple

from simplab.catalog import DEFAULT_CATALOG, SubstanceCatalog
from simplab.colors import is_valid_hex
from simplab.constants import PH_MAX, PH_MIN
from simplab.errors import CatalogError
from simplab.models import Category, EffectDescriptor, Product

ACID_CATEGORIES = frozenset({Category.ACID, Category.WEAK_ACID})
BASE_CATEGORIES = frozenset({Category.BASE, Category.WEAK_BASE})


class RulePattern(Protocol):
    def matches(self, present: AbstractSet[str], catalog: SubstanceCatalog) -> bool:
        """Return True if the pattern is satisfied by the present substances."""
        ...

    @property
    def substance_ids(self) -> Tuple[str, ...]:
        """Substance identifiers the pattern refers to explicitly."""
        ...


def _any_in_categories(
    present: AbstractSet[str],
    catalog: SubstanceCatalog,
    categories: AbstractSet[Category],
) -> bool:
    return any(catalog.lookup(sid).category in categories for sid in present)


@dataclass(frozen=True)
class PairPattern:
    """Both named substances are present."""

    first: str
    second: str

    def matches(self, present: AbstractSet[str], catalog: SubstanceCatalog) -> bool:
        return self.first in present and self.second in present

    @property
    def substance_ids(self) -> Tuple[str, ...]:
        return (self.first, self.second)


@dataclass(frozen=True)
class CategoryPattern:
    """At least one member of each category group is present."""

    first: frozenset
    second: frozenset

    def matches(self, present: AbstractSet[str], catalog: SubstanceCatalog) -> bool:
        return _any_in_categories(present, catalog, self.first) and _any_in_categories(
            present, catalog, self.second
        )

    @property
    def substance_ids(self) -> Tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class SubstanceWithCategoryPattern:
    """A named substance together with any member of a category group."""

    substance_id: str
    categories: frozenset

    def matches(self, present: AbstractSet[str], catalog: SubstanceCatalog) -> bool:
        others = set(present) - {self.substance_id}
        return self.substance_id in present and _any_in_categories(
            others, catalog, self.categories
        )

    @property
    def substance_ids(self) -> Tuple[str, ...]:
        return (self.substance_id,)


@dataclass(frozen=True)
class PresencePattern:
    """The named substance is present, whatever else is in the container."""

    substance_id: str

    def matches(self, present: AbstractSet[str], catalog: SubstanceCatalog) -> bool:
        return self.substance_id in present

    @property
    def substance_ids(self) -> Tuple[str, ...]:
        return (self.substance_id,)


@dataclass(frozen=True)
class ReactionRule:
    id: str
    pattern: RulePattern
    description: str
    effects: EffectDescriptor
    equation: Optional[str] = None
    fixed_ph: Optional[float] = None


class RuleSet:
    """Ordered, immutable collection of reaction rules plus their products."""

    def __init__(
        self,
        rules: Sequence[ReactionRule],
        products: Mapping[str, Sequence[Product]],
    ):
        self._rules: Tuple[ReactionRule, ...] = tuple(rules)
        self._products = {rule_id: tuple(items) for rule_id, items in products.items()}

    @property
    def rules(self) -> Tuple[ReactionRule, ...]:
        return self._rules

    def match(
        self, present: AbstractSet[str], catalog: SubstanceCatalog
    ) -> Optional[ReactionRule]:
        for rule in self._rules:
            if rule.pattern.matches(present, catalog):
                return rule
        return None

    def products_for(self, rule_id: str) -> Tuple[Product, ...]:
        return self._products.get(rule_id, ())

    def validate(self, catalog: SubstanceCatalog) -> None:
        """Check the rule set against a catalog; raise :class:`CatalogError`."""
        seen: set[str] = set()
        for rule in self._rules:
            if rule.id in seen:
                raise CatalogError(f"Duplicate rule identifier: {rule.id}")
            seen.add(rule.id)
            for sid in rule.pattern.substance_ids:
                if sid not in catalog:
                    raise CatalogError(f"Rule {rule.id} refers to unknown substance {sid}")
            for color in (rule.effects.precipitate_color, rule.effects.final_color):
                if color is not None and not is_valid_hex(color):
                    raise CatalogError(f"Rule {rule.id}: invalid color {color!r}")
            if rule.fixed_ph is not None and not PH_MIN <= rule.fixed_ph <= PH_MAX:
                raise CatalogError(f"Rule {rule.id}: pH {rule.fixed_ph} out of range")
            if rule.id not in self._products:
                raise CatalogError(f"Rule {rule.id} has no product table entry")

    def __iter__(self) -> Iterator[ReactionRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)


# Order is significant: the first matching rule wins.
BUILTIN_RULES = (
    ReactionRule(
        id="precipitation",
        pattern=PairPattern("AgNO3", "NaCl"),
        description="Silver Chloride Precipitation",
        equation="AgNO₃ + NaCl → AgCl↓ + NaNO₃",
        effects=EffectDescriptor(
            precipitate=True, color_change=True, precipitate_color="#F5F5F5"
        ),
    ),
    ReactionRule(
        id="neutralization",
        pattern=CategoryPattern(ACID_CATEGORIES, BASE_CATEGORIES),
        description="Acid-Base Neutralization",
        effects=EffectDescriptor(heat=True, color_change=True),
        fixed_ph=7.0,
    ),
    ReactionRule(
        id="oxidation_permanganate",
        pattern=SubstanceWithCategoryPattern("KMnO4", ACID_CATEGORIES),
        description="Permanganate Oxidation",
        equation="KMnO₄ + H⁺ → Mn²⁺ + ...",
        effects=EffectDescriptor(gas=True, color_change=True, final_color="#FFB6C1"),
    ),
    ReactionRule(
        id="decomposition_peroxide",
        pattern=PresencePattern("H2O2"),
        description="Hydrogen Peroxide Decomposition",
        equation="2H₂O₂ → 2H₂O + O₂↑",
        effects=EffectDescriptor(heat=True, gas=True),
    ),
    ReactionRule(
        id="copper_complex",
        pattern=PairPattern("CuSO4", "NH3"),
        description="Copper-Ammonia Complex Formation",
        equation="CuSO₄ + 4NH₃ → [Cu(NH₃)₄]²⁺ + SO₄²⁻",
        effects=EffectDescriptor(color_change=True, final_color="#000080"),
    ),
)

BUILTIN_PRODUCTS = {
    "neutralization": (
        Product("Salt", "Salt (varies)"),
        Product("H₂O", "Water"),
    ),
    "precipitation": (
        Product("AgCl↓", "Silver Chloride (precipitate)"),
        Product("NaNO₃", "Sodium Nitrate"),
    ),
    "oxidation_permanganate": (
        Product("Mn²⁺", "Manganese(II) ion"),
        Product("H₂O", "Water"),
    ),
    "decomposition_peroxide": (
        Product("H₂O", "Water"),
        Product("O₂↑", "Oxygen gas"),
    ),
    "copper_complex": (
        Product("[Cu(NH₃)₄]²⁺", "Tetraamminecopper(II) complex"),
    ),
}


def build_rule_set(
    catalog: SubstanceCatalog,
    rules: Sequence[ReactionRule] = BUILTIN_RULES,
    products: Mapping[str, Sequence[Product]] = BUILTIN_PRODUCTS,
) -> RuleSet:
    """Create a rule set and validate it against ``catalog``."""
    rule_set = RuleSet(rules, products)
    rule_set.validate(catalog)
    return rule_set


DEFAULT_RULE_SET = build_rule_set(DEFAULT_CATALOG)
