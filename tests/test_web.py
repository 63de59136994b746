from __future__ import annotations

import pytest
from flask import Flask
from werkzeug.security import generate_password_hash

from src.meeting_attendance.meeting_attendance.access.controller import register as register_access
from src.meeting_attendance.meeting_attendance.access.service import AccessService
from src.meeting_attendance.meeting_attendance.attendance.controller import register as register_attendance
from src.meeting_attendance.meeting_attendance.attendance.service import AttendanceService
from src.meeting_attendance.meeting_attendance.common.web import register_error_handlers
from src.meeting_attendance.meeting_attendance.container import Container
from src.meeting_attendance.meeting_attendance.core.constants import ACCESS_KEY_CONFIG_KEY
from src.meeting_attendance.meeting_attendance.core.exceptions import StoreError
from src.meeting_attendance.meeting_attendance.meetings.controller import register as register_meetings
from src.meeting_attendance.meeting_attendance.people.controller import register as register_people
from src.meeting_attendance.meeting_attendance.people.service import RosterService
from src.meeting_attendance.meeting_attendance.settings.controller import register as register_settings
from src.meeting_attendance.meeting_attendance.settings.service import SettingsService
from src.meeting_attendance.meeting_attendance.stats.controller import register as register_stats
from src.meeting_attendance.meeting_attendance.stats.service import StatsService


class InMemoryConfig:
    def __init__(self, values):
        self.values = values

    def get_value(self, key):
        return self.values.get(key)

    def set_value(self, key, value):
        self.values[key] = value


@pytest.fixture
def client(attendance, meetings, people, feed, scheduler):
    config_repo = InMemoryConfig({ACCESS_KEY_CONFIG_KEY: generate_password_hash("letmein")})
    roster = RosterService(people, attendance)
    roster.reload()
    container = Container(
        conn=None,
        feed=feed,
        meetings_repo=meetings,
        people_repo=people,
        attendance_repo=attendance,
        config_repo=config_repo,
        access_service=AccessService(config_repo),
        roster_service=roster,
        attendance_service=AttendanceService(attendance, meetings, roster, feed=feed, scheduler=scheduler),
        stats_service=StatsService(attendance, meetings, people),
        settings_service=SettingsService(),
    )

    app = Flask(__name__)
    app.secret_key = "test"
    app.config["TESTING"] = True
    register_error_handlers(app)
    for register in (
        register_access,
        register_meetings,
        register_attendance,
        register_people,
        register_stats,
        register_settings,
    ):
        register(app, container)
    return app.test_client()


@pytest.fixture
def authed(client):
    assert client.post("/login", json={"access_key": "letmein"}).status_code == 200
    return client


def test_api_requires_login(client):
    resp = client.get("/api/meetings")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_wrong_key_is_401(client):
    assert client.post("/login", json={"access_key": "nope"}).status_code == 401


def test_logout_closes_gate(authed):
    authed.post("/logout")
    assert authed.get("/api/meetings").status_code == 401


def test_meetings_overview(authed):
    body = authed.get("/api/meetings").get_json()
    assert [m["name"] for m in body["meetings"]] == ["Sunday Service", "Shabibeh", "Bible Study"]
    assert body["meetings"][0]["weekday"] == "Sunday"


def test_mark_then_duplicate(authed):
    url = "/api/meetings/m-sun/attendance?date=2024-06-02"

    first = authed.post(url, json={"person_id": "p-john"})
    second = authed.post(url, json={"person_id": "p-john"})

    assert first.status_code == 201
    assert first.get_json()["marked_person_ids"] == ["p-john"]
    assert second.status_code == 409
    assert second.get_json()["result"] == "duplicate"


def test_mark_on_wrong_weekday_is_400(authed):
    resp = authed.post("/api/meetings/m-sun/attendance?date=2024-06-03", json={"person_id": "p-john"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "This service only meets on Sundays."


def test_remove_and_undo(authed, attendance):
    url = "/api/meetings/m-sun/attendance"
    entry_id = authed.post(f"{url}?date=2024-06-02", json={"person_id": "p-mary"}).get_json()["entries"][0]["id"]

    removed = authed.delete(f"{url}/{entry_id}?date=2024-06-02").get_json()
    assert removed["entries"] == []
    assert removed["pending_undo"]["id"] == entry_id

    restored = authed.post(f"{url}/undo?date=2024-06-02").get_json()
    assert restored["restored"] is True
    assert [e["id"] for e in restored["entries"]] == [entry_id]
    assert attendance.deleted == []


def test_unknown_person_is_404(authed):
    resp = authed.post("/api/meetings/m-sun/attendance?date=2024-06-02", json={"person_id": "p-ghost"})
    assert resp.status_code == 404


def test_store_outage_is_503(authed, attendance):
    def down(date):
        raise StoreError("connection refused")

    attendance.counts_for_date = down
    assert authed.get("/api/meetings").status_code == 503


def test_import_people(authed):
    body = authed.post("/api/people/import", json={"names": "Zed, Amy, zed"}).get_json()
    assert [p["full_name"] for p in body["added"]] == ["Zed", "Amy"]
    assert body["skipped"] == 1


def test_dashboard_rejects_unknown_timeframe(authed):
    assert authed.get("/api/history/dashboard?timeframe=5y").status_code == 400
    assert authed.get("/api/history/dashboard?timeframe=all").status_code == 200


def test_export_csv(authed, attendance):
    attendance.add(meeting_id="m-sun", person_id="p-john", date="2024-06-02")

    resp = authed.get("/api/export.csv")

    assert resp.mimetype == "text/csv"
    assert resp.get_data(as_text=True).startswith('Date,Meeting,Person,Marked At\n"2024-06-02",')


def test_settings_roundtrip(authed):
    assert authed.get("/api/settings").get_json()["settings"] == {"theme": "light", "accent": "Blue"}
    assert authed.put("/api/settings", json={"accent": "Neon"}).status_code == 400

    body = authed.put("/api/settings", json={"theme": "dark", "accent": "Green-700"}).get_json()
    assert body["settings"] == {"theme": "dark", "accent": "Green-700"}


def test_attendance_view_reloads_from_store(authed, attendance):
    url = "/api/meetings/m-sun/attendance?date=2024-06-02"
    assert authed.get(url).get_json()["entries"] == []

    attendance.add(meeting_id="m-sun", person_id="p-john", date="2024-06-02")

    body = authed.get(url).get_json()
    assert body["marked_person_ids"] == ["p-john"]
