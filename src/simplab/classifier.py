"""Reaction classifier.

``classify`` maps the contents of a container to a :class:`ReactionResult`.
It is a pure function of its inputs apart from the timestamp it attaches:
rule matching, color and pH only depend on which substances are present
(with multiplicity), never on the order they were added. The order is only
kept for the ``reactants`` listing.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from simplab.catalog import DEFAULT_CATALOG, SubstanceCatalog
from simplab.colors import mix_colors
from simplab.constants import NEUTRAL_COLOR, NEUTRAL_PH
from simplab.models import (
    EffectFlags,
    Reactant,
    ReactionResult,
    Substance,
    VisualData,
)
from simplab.rules import DEFAULT_RULE_SET, ReactionRule, RuleSet

logger = logging.getLogger(__name__)

EMPTY_TYPE = "empty"
SINGLE_TYPE = "single"
MIXTURE_TYPE = "mixture"


def now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def estimate_ph(substances: Sequence[Substance], rule: Optional[ReactionRule] = None) -> float:
    """Mean pH of the substances, or the rule's fixed pH when it pins one.

    No buffering or concentration weighting is modelled.
    """
    if rule is not None and rule.fixed_ph is not None:
        return rule.fixed_ph
    if not substances:
        return NEUTRAL_PH
    return round(sum(s.ph for s in substances) / len(substances), 2)


def generate_equation(substances: Sequence[Substance], with_products: bool = False) -> str:
    equation = " + ".join(s.formula for s in substances)
    if with_products:
        equation += " → Products"
    return equation


def _reactants(substances: Sequence[Substance]) -> tuple[Reactant, ...]:
    return tuple(Reactant(id=s.id, name=s.name, formula=s.formula) for s in substances)


def _empty_result(timestamp: int) -> ReactionResult:
    return ReactionResult(
        occurred=False,
        type=EMPTY_TYPE,
        description="Empty beaker",
        equation="",
        reactants=(),
        products=(),
        effects=EffectFlags(),
        visual_data=VisualData(liquid_color=NEUTRAL_COLOR),
        ph=NEUTRAL_PH,
        timestamp=timestamp,
    )


def _single_result(substance: Substance, timestamp: int) -> ReactionResult:
    return ReactionResult(
        occurred=False,
        type=SINGLE_TYPE,
        description=f"Pure {substance.name}",
        equation=substance.formula,
        reactants=_reactants([substance]),
        products=(),
        effects=EffectFlags(),
        visual_data=VisualData(liquid_color=substance.color),
        ph=substance.ph,
        timestamp=timestamp,
    )


def _mixture_result(substances: Sequence[Substance], timestamp: int) -> ReactionResult:
    return ReactionResult(
        occurred=False,
        type=MIXTURE_TYPE,
        description="Physical mixture (no chemical reaction)",
        equation=generate_equation(substances),
        reactants=_reactants(substances),
        products=(),
        effects=EffectFlags(color_change=True),
        visual_data=VisualData(liquid_color=mix_colors([s.color for s in substances])),
        ph=estimate_ph(substances),
        timestamp=timestamp,
    )


def _reaction_result(
    substances: Sequence[Substance],
    rule: ReactionRule,
    rules: RuleSet,
    timestamp: int,
) -> ReactionResult:
    effects = rule.effects
    liquid_color = effects.final_color or mix_colors([s.color for s in substances])
    return ReactionResult(
        occurred=True,
        type=rule.id,
        description=rule.description,
        equation=rule.equation or generate_equation(substances, with_products=True),
        reactants=_reactants(substances),
        products=rules.products_for(rule.id),
        effects=EffectFlags(
            color_change=effects.color_change,
            heat=effects.heat,
            gas=effects.gas,
            precipitate=effects.precipitate,
        ),
        visual_data=VisualData(
            liquid_color=liquid_color,
            precipitate_color=effects.precipitate_color,
            bubble_intensity="high" if effects.gas else "none",
            heat_level="warm" if effects.heat else "normal",
        ),
        ph=estimate_ph(substances, rule),
        timestamp=timestamp,
    )


def classify(
    contents: Sequence[str],
    catalog: SubstanceCatalog = DEFAULT_CATALOG,
    rules: RuleSet = DEFAULT_RULE_SET,
    timestamp: Optional[int] = None,
) -> ReactionResult:
    """Classify container contents into a reaction result.

    Args:
        contents: Substance identifiers in the order they were added.
        catalog: Catalog used to resolve identifiers.
        rules: Ordered rule set; the first matching rule wins.
        timestamp: Milliseconds since the epoch; defaults to now.

    Raises:
        SubstanceNotFoundError: If an identifier is not in ``catalog``.
    """
    timestamp = now_ms() if timestamp is None else timestamp
    substances = [catalog.lookup(sid) for sid in contents]

    if not substances:
        return _empty_result(timestamp)

    # Presence-triggered rules can fire for a single substance, so rules are
    # evaluated before the single-substance fallback.
    rule = rules.match(frozenset(contents), catalog)
    if rule is not None:
        logger.debug("Contents %s matched rule %s", list(contents), rule.id)
        return _reaction_result(substances, rule, rules, timestamp)

    if len(substances) == 1:
        return _single_result(substances[0], timestamp)

    logger.debug("No rule matched %s; treating as mixture", list(contents))
    return _mixture_result(substances, timestamp)
