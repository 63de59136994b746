from __future__ import annotations

from flask import Flask, session

from ..common.web import json_body, login_required, ok
from ..container import Container
from .model import ACCENT_COLORS, Preferences
from .store import MappingSettingsStore


def _prefs_json(p: Preferences) -> dict:
    return {"theme": p.theme.value, "accent": p.accent}


def register(app: Flask, container: Container) -> None:
    service = container.settings_service

    @app.route("/api/settings", methods=["GET"], endpoint="api_settings")
    @login_required
    def get_settings():
        prefs = service.load(MappingSettingsStore(session))
        return ok(settings=_prefs_json(prefs), accents=list(ACCENT_COLORS))

    @app.route("/api/settings", methods=["PUT"], endpoint="api_settings_update")
    @login_required
    def update_settings():
        data = json_body()
        prefs = service.update(MappingSettingsStore(session), theme=data.get("theme"), accent=data.get("accent"))
        return ok(settings=_prefs_json(prefs))
