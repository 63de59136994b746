from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Theme

BASE_ACCENTS = (
    "Blue",
    "Indigo",
    "Purple",
    "Fuchsia",
    "Pink",
    "Rose",
    "Red",
    "Orange",
    "Amber",
    "Green",
    "Teal",
    "Cyan",
    "Grey",
)
ACCENT_SHADES = ("", "-400", "-300", "-700", "-900")

ACCENT_COLORS = tuple(base + shade for base in BASE_ACCENTS for shade in ACCENT_SHADES)
DEFAULT_ACCENT = "Blue"
DEFAULT_THEME = Theme.LIGHT


@dataclass(frozen=True)
class Preferences:
    theme: Theme = DEFAULT_THEME
    accent: str = DEFAULT_ACCENT
