from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Person:
    """Domain entity: someone on the roster.

    Note: ``full_name`` is unique case-insensitively (after trimming); the
    service layer enforces it, the store does not.
    """

    person_id: str
    full_name: str
    phone: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
