from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.enums import ChangeType


@dataclass(frozen=True)
class ChangeEvent:
    """A row-level change pushed by the store to its subscribers."""

    collection: str
    event_type: ChangeType
    new: Optional[Mapping[str, Any]] = None
    old: Optional[Mapping[str, Any]] = None

    @property
    def row(self) -> Mapping[str, Any]:
        return self.new if self.new is not None else (self.old or {})
