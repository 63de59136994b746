from __future__ import annotations

from typing import MutableMapping, Optional, Protocol


class SettingsStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class MappingSettingsStore(SettingsStore):
    """Settings kept in any mutable mapping; the web layer passes the Flask session."""

    def __init__(self, backing: MutableMapping, *, prefix: str = "settings."):
        self._backing = backing
        self._prefix = prefix

    def get(self, key: str) -> Optional[str]:
        value = self._backing.get(self._prefix + key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        self._backing[self._prefix + key] = value
