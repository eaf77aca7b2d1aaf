"""A lab session: open containers plus the history the caller keeps."""

from __future__ import annotations

from typing import Any, Dict, Optional

from simplab.containers import Container, ContainerManager
from simplab.errors import EmptyContainerError, SettingsError
from simplab.history import SessionHistory, format_for_external_analysis
from simplab.models import HistoryEntry, ReactionResult
from simplab.settings import LabSettings


class LabSession:
    """Convenience facade over a :class:`ContainerManager` and a history.

    The history is passed in (or created) by the caller and only ever
    appended to by :meth:`record_run`. ``settings`` configures the manager
    built when none is given; passing both is an error, since a ready-made
    manager already carries its own settings.
    """

    def __init__(
        self,
        manager: Optional[ContainerManager] = None,
        history: Optional[SessionHistory] = None,
        settings: Optional[LabSettings] = None,
    ):
        if manager is not None and settings is not None:
            raise SettingsError("Pass either a manager or settings, not both")
        self.manager = manager if manager is not None else ContainerManager(settings=settings)
        self.history = history if history is not None else SessionHistory()

    def new_container(self, label: Optional[str] = None) -> Container:
        return self.manager.new_container(label)

    def add_substance(self, container_id: str, substance_id: str) -> ReactionResult:
        return self.manager.add_substance(container_id, substance_id)

    def remove_last(self, container_id: str) -> ReactionResult:
        return self.manager.remove_last(container_id)

    def clear(self, container_id: str) -> ReactionResult:
        return self.manager.clear(container_id)

    def discard(self, container_id: str) -> None:
        self.manager.discard(container_id)

    def record_run(self, container_id: str, timestamp: Optional[int] = None) -> HistoryEntry:
        """Append the container's current result to the history."""
        container = self.manager.get(container_id)
        if not container.contents:
            raise EmptyContainerError(container_id)
        return self.history.append(container_id, container.result, timestamp)

    def format_for_external_analysis(self, container_id: str) -> Dict[str, Any]:
        container = self.manager.get(container_id)
        return format_for_external_analysis(
            container.id, container.contents, container.result, self.manager.catalog
        )
