"""Key-value persistence port for profile and plan snapshots."""

from dataclasses import dataclass
from typing import Protocol

PROFILE_KEY = "nutri_profile"
PLAN_KEY = "nutri_plan"


class KeyValueStore(Protocol):
    """String key-value storage interface."""

    def get(self, key: str) -> str | None:
        """Return the stored value or None."""

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    def delete(self, key: str) -> None:
        """Remove a key if present."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, used for development and tests."""

    _values: dict[str, str]

    def __init__(self) -> None:
        self._values = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)
