"""Container state management.

A container holds an ordered sequence of substance identifiers. Its reaction
result and visuals are never edited directly: every mutation replaces the
contents and re-runs the classifier, so the stored result always equals
``classify(container.contents)``.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

from simplab.catalog import DEFAULT_CATALOG, SubstanceCatalog
from simplab.classifier import classify
from simplab.constants import (
    BASE_FILL_LEVEL,
    EMPTY_FILL_LEVEL,
    FILL_INCREMENT,
    MAX_FILL_LEVEL,
)
from simplab.errors import (
    ContainerFullError,
    ContainerLimitError,
    ContainerNotFoundError,
    SubstanceNotFoundError,
)
from simplab.models import ReactionResult
from simplab.rules import DEFAULT_RULE_SET, RuleSet
from simplab.settings import LabSettings

logger = logging.getLogger(__name__)


class ContainerState(str, Enum):
    EMPTY = "empty"
    SINGLE = "single"
    MIXTURE = "mixture"
    REACTED = "reacted"


def fill_level(count: int) -> float:
    """Liquid height as a fraction of the container, from the substance count."""
    if count <= 0:
        return EMPTY_FILL_LEVEL
    return round(min(MAX_FILL_LEVEL, BASE_FILL_LEVEL + FILL_INCREMENT * count), 6)


@dataclass(frozen=True)
class ContainerVisuals:
    liquid_color: str
    fill_level: float
    show_bubbles: bool
    show_precipitate: bool
    precipitate_color: Optional[str]
    bubble_intensity: str
    heat_level: str

    @classmethod
    def from_result(cls, result: ReactionResult, count: int) -> "ContainerVisuals":
        visual = result.visual_data
        return cls(
            liquid_color=visual.liquid_color,
            fill_level=fill_level(count),
            show_bubbles=result.effects.bubbles,
            show_precipitate=result.effects.precipitate,
            precipitate_color=visual.precipitate_color,
            bubble_intensity=visual.bubble_intensity,
            heat_level=visual.heat_level,
        )

    def to_dict(self) -> dict:
        return {
            "liquidColor": self.liquid_color,
            "fillLevel": self.fill_level,
            "showBubbles": self.show_bubbles,
            "showPrecipitate": self.show_precipitate,
            "precipitateColor": self.precipitate_color,
            "bubbleIntensity": self.bubble_intensity,
            "heatLevel": self.heat_level,
        }


class Container:
    """A beaker whose derived state is recomputed from its contents."""

    def __init__(
        self,
        container_id: str,
        label: str,
        capacity: int,
        catalog: SubstanceCatalog,
        rules: RuleSet,
    ):
        self.id = container_id
        self.label = label
        self.capacity = capacity
        self._catalog = catalog
        self._rules = rules
        self._contents: Tuple[str, ...] = ()
        self._result = classify(self._contents, catalog, rules)

    @property
    def contents(self) -> Tuple[str, ...]:
        return self._contents

    @property
    def result(self) -> ReactionResult:
        return self._result

    @property
    def visuals(self) -> ContainerVisuals:
        return ContainerVisuals.from_result(self._result, len(self._contents))

    @property
    def state(self) -> ContainerState:
        if not self._contents:
            return ContainerState.EMPTY
        if self._result.occurred:
            return ContainerState.REACTED
        if len(self._contents) == 1:
            return ContainerState.SINGLE
        return ContainerState.MIXTURE

    @property
    def is_full(self) -> bool:
        return len(self._contents) >= self.capacity

    def _replace_contents(self, contents: Sequence[str]) -> ReactionResult:
        contents = tuple(contents)
        # Classify first so an unknown identifier leaves the container untouched.
        result = classify(contents, self._catalog, self._rules)
        self._contents = contents
        self._result = result
        return result

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "contents": list(self._contents),
            "state": self.state.value,
            "visuals": self.visuals.to_dict(),
            "reactionResult": self._result.to_dict(),
        }

    def __repr__(self) -> str:
        return f"Container(id={self.id!r}, contents={list(self._contents)!r})"


class ContainerManager:
    """Owns the open containers of a lab session and applies mutations."""

    def __init__(
        self,
        settings: Optional[LabSettings] = None,
        catalog: SubstanceCatalog = DEFAULT_CATALOG,
        rules: RuleSet = DEFAULT_RULE_SET,
    ):
        self.settings = settings or LabSettings()
        self.catalog = catalog
        self.rules = rules
        self._containers: Dict[str, Container] = {}
        self._counter = itertools.count(1)

    @property
    def containers(self) -> Tuple[Container, ...]:
        return tuple(self._containers.values())

    def get(self, container_id: str) -> Container:
        try:
            return self._containers[container_id]
        except KeyError:
            raise ContainerNotFoundError(container_id) from None

    def new_container(self, label: Optional[str] = None) -> Container:
        if len(self._containers) >= self.settings.max_containers:
            raise ContainerLimitError(self.settings.max_containers)
        number = next(self._counter)
        container = Container(
            container_id=f"{self.settings.container_prefix}-{number}",
            label=label or f"{self.settings.container_prefix.capitalize()} {number}",
            capacity=self.settings.max_substances_per_container,
            catalog=self.catalog,
            rules=self.rules,
        )
        self._containers[container.id] = container
        logger.debug("Opened container %s", container.id)
        return container

    def add_substance(self, container_id: str, substance_id: str) -> ReactionResult:
        """Append a substance and return the recomputed result.

        Raises:
            ContainerNotFoundError: Unknown container.
            ContainerFullError: The container already holds its capacity.
            SubstanceNotFoundError: The substance is not in the catalog.
        """
        container = self.get(container_id)
        if container.is_full:
            logger.warning("Container %s is full; rejected %s", container_id, substance_id)
            raise ContainerFullError(container_id, container.capacity)
        try:
            self.catalog.lookup(substance_id)
        except SubstanceNotFoundError:
            logger.warning("Unknown substance %r rejected for %s", substance_id, container_id)
            raise
        result = container._replace_contents(container.contents + (substance_id,))
        logger.debug("Added %s to %s -> %s", substance_id, container_id, result.type)
        return result

    def remove_last(self, container_id: str) -> ReactionResult:
        container = self.get(container_id)
        if not container.contents:
            return container.result
        return container._replace_contents(container.contents[:-1])

    def clear(self, container_id: str) -> ReactionResult:
        return self.get(container_id)._replace_contents(())

    def discard(self, container_id: str) -> None:
        self.get(container_id)
        del self._containers[container_id]
        logger.debug("Discarded container %s", container_id)
