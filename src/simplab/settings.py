"""Lab configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from simplab.constants import (
    DEFAULT_CONTAINER_PREFIX,
    DEFAULT_MAX_CONTAINERS,
    DEFAULT_MAX_SUBSTANCES,
)
from simplab.errors import SettingsError

_KEYS = {
    "max_substances": "max_substances_per_container",
    "max_containers": "max_containers",
    "container_prefix": "container_prefix",
}


@dataclass(frozen=True)
class LabSettings:
    """Limits applied by a container manager.

    Attributes:
        max_substances_per_container: Capacity limit of each container.
        max_containers: Maximum number of concurrently open containers.
        container_prefix: Prefix used when generating container ids.
    """

    max_substances_per_container: int = DEFAULT_MAX_SUBSTANCES
    max_containers: int = DEFAULT_MAX_CONTAINERS
    container_prefix: str = DEFAULT_CONTAINER_PREFIX

    def __post_init__(self) -> None:
        if self.max_substances_per_container < 1:
            raise SettingsError("max_substances must be at least 1")
        if self.max_containers < 1:
            raise SettingsError("max_containers must be at least 1")
        if not self.container_prefix:
            raise SettingsError("container_prefix must be non-empty")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LabSettings":
        unknown = set(data) - set(_KEYS)
        if unknown:
            raise SettingsError(f"Unknown settings: {', '.join(sorted(unknown))}")
        kwargs: dict[str, Any] = {}
        for key, field_name in _KEYS.items():
            if key not in data:
                continue
            value = data[key]
            if field_name == "container_prefix":
                kwargs[field_name] = str(value)
            else:
                try:
                    kwargs[field_name] = int(value)
                except (TypeError, ValueError):
                    raise SettingsError(f"{key} must be an integer, got {value!r}") from None
        return cls(**kwargs)


def load_settings(path: str | Path) -> LabSettings:
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise SettingsError("Settings file must contain a JSON object")
    return LabSettings.from_mapping(data)
