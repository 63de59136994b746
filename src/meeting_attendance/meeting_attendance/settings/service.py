from __future__ import annotations

from typing import Optional

from ..core.enums import Theme
from ..core.exceptions import ValidationError
from .model import ACCENT_COLORS, DEFAULT_ACCENT, DEFAULT_THEME, Preferences
from .store import SettingsStore

THEME_KEY = "theme"
ACCENT_KEY = "accent-color"


def _parse_theme(value: Optional[str]) -> Theme:
    try:
        return Theme(value)
    except ValueError:
        raise ValidationError(f"Unknown theme: {value}") from None


class SettingsService:
    def load(self, store: SettingsStore) -> Preferences:
        """Stored preferences; unknown stored values fall back to the defaults."""
        theme = store.get(THEME_KEY)
        accent = store.get(ACCENT_KEY)
        return Preferences(
            theme=Theme(theme) if theme in {t.value for t in Theme} else DEFAULT_THEME,
            accent=accent if accent in ACCENT_COLORS else DEFAULT_ACCENT,
        )

    def update(self, store: SettingsStore, *, theme: Optional[str] = None, accent: Optional[str] = None) -> Preferences:
        # Validate both before writing either.
        new_theme = _parse_theme(theme) if theme is not None else None
        if accent is not None and accent not in ACCENT_COLORS:
            raise ValidationError(f"Unknown accent colour: {accent}")

        if new_theme is not None:
            store.set(THEME_KEY, new_theme.value)
        if accent is not None:
            store.set(ACCENT_KEY, accent)
        return self.load(store)
