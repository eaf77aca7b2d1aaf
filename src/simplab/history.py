"""Session history and the export record for external analysis services."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

from simplab.catalog import DEFAULT_CATALOG, SubstanceCatalog
from simplab.classifier import now_ms
from simplab.constants import STANDARD_PRESSURE_ATM, STANDARD_TEMPERATURE_K
from simplab.models import HistoryEntry, ReactionResult

logger = logging.getLogger(__name__)


class SessionHistory:
    """Append-only log of analysed runs.

    The history is owned by the caller and is independent of any container;
    entries capture a result snapshot and are never edited or removed.
    """

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    def append(
        self,
        container_id: str,
        result: ReactionResult,
        timestamp: Optional[int] = None,
    ) -> HistoryEntry:
        entry = HistoryEntry(
            container_id=container_id,
            timestamp=now_ms() if timestamp is None else timestamp,
            result=result,
        )
        self._entries.append(entry)
        logger.debug("Recorded %s run for %s", result.type, container_id)
        return entry

    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def for_container(self, container_id: str) -> Tuple[HistoryEntry, ...]:
        return tuple(e for e in self._entries if e.container_id == container_id)

    def latest(self, container_id: Optional[str] = None) -> Optional[HistoryEntry]:
        entries = self._entries if container_id is None else self.for_container(container_id)
        return entries[-1] if entries else None

    def to_list(self) -> list[Dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


def format_for_external_analysis(
    container_id: str,
    contents: Sequence[str],
    result: ReactionResult,
    catalog: SubstanceCatalog = DEFAULT_CATALOG,
) -> Dict[str, Any]:
    """Serialize a container's substances and latest result for remote services.

    Temperature and pressure are fixed standard conditions.
    """
    chemicals = []
    for substance_id in contents:
        substance = catalog.lookup(substance_id)
        chemicals.append(
            {
                "id": substance.id,
                "name": substance.name,
                "formula": substance.formula,
                "concentration": substance.concentration,
            }
        )
    return {
        "container_id": container_id,
        "chemicals": chemicals,
        "reaction": {
            "type": result.type,
            "occurred": result.occurred,
            "equation": result.equation,
            "products": [p.to_dict() for p in result.products],
        },
        "conditions": {
            "temperature_kelvin": STANDARD_TEMPERATURE_K,
            "pressure_atm": STANDARD_PRESSURE_ATM,
            "pH": result.ph,
        },
        "timestamp": result.timestamp,
    }
