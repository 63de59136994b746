from __future__ import annotations

from flask import Flask, request

from ..common.serializers import dashboard_json, profile_json
from ..common.web import login_required, ok
from ..container import Container
from .service import parse_timeframe


def register(app: Flask, container: Container) -> None:
    stats = container.stats_service

    @app.route("/api/people/<person_id>/profile", methods=["GET"], endpoint="api_person_profile")
    @login_required
    def person_profile(person_id: str):
        return ok(profile=profile_json(stats.person_profile(person_id)))

    @app.route("/api/history/dashboard", methods=["GET"], endpoint="api_history_dashboard")
    @login_required
    def dashboard():
        timeframe = parse_timeframe(request.args.get("timeframe"))
        return ok(dashboard=dashboard_json(stats.dashboard(timeframe)))
