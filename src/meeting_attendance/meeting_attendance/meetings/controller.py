from __future__ import annotations

from flask import Flask

from ..common.serializers import meeting_json
from ..common.web import login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/meetings", methods=["GET"], endpoint="api_meetings")
    @login_required
    def list_meetings():
        overview = container.attendance_service.overview()
        return ok(
            meetings=[{**meeting_json(o.meeting), "count_today": o.count_today} for o in overview],
        )
