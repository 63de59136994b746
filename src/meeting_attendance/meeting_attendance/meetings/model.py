from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.datetime_utils import required_weekday
from ..core.enums import Weekday


@dataclass(frozen=True)
class Meeting:
    """A recurring meeting (e.g. a weekly service) people attend."""

    meeting_id: str
    name: str
    display_order: int = 0

    @property
    def weekday(self) -> Optional[Weekday]:
        return required_weekday(self.name)
