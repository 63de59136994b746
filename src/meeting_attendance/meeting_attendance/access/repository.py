from __future__ import annotations

from typing import Optional, Protocol


class ConfigRepository(Protocol):
    """Key/value application settings kept in the store (``app_config``)."""

    def get_value(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_value(self, key: str, value: str) -> None:
        raise NotImplementedError
