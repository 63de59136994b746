from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Meeting


class MeetingRepository(Protocol):
    def list_meetings(self) -> Sequence[Meeting]:
        """All meetings ordered by display_order."""

        raise NotImplementedError

    def get_by_id(self, meeting_id: str) -> Optional[Meeting]:
        raise NotImplementedError
