"""Exception hierarchy for SimpLab."""

from __future__ import annotations


class SimpLabError(Exception):
    """Base class for all recoverable SimpLab errors."""


class SubstanceNotFoundError(SimpLabError, KeyError):
    def __init__(self, substance_id: str) -> None:
        super().__init__(substance_id)
        self.substance_id = substance_id

    def __str__(self) -> str:
        return f"Substance not found: {self.substance_id!r}"


class ContainerNotFoundError(SimpLabError, KeyError):
    def __init__(self, container_id: str) -> None:
        super().__init__(container_id)
        self.container_id = container_id

    def __str__(self) -> str:
        return f"Container not found: {self.container_id!r}"


class ContainerFullError(SimpLabError):
    def __init__(self, container_id: str, capacity: int) -> None:
        super().__init__(
            f"Container {container_id!r} is full ({capacity} substances). "
            "Remove a substance first."
        )
        self.container_id = container_id
        self.capacity = capacity


class ContainerLimitError(SimpLabError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"Maximum number of open containers reached ({limit}).")
        self.limit = limit


class EmptyContainerError(SimpLabError):
    def __init__(self, container_id: str) -> None:
        super().__init__(f"Container {container_id!r} is empty; nothing to analyse.")
        self.container_id = container_id


class CatalogError(SimpLabError, ValueError):
    """Malformed catalog or rule data, detected at load time."""


class SettingsError(SimpLabError, ValueError):
    """Invalid lab configuration."""


class ScriptError(SimpLabError, ValueError):
    """A malformed step in a replayed operation script."""
