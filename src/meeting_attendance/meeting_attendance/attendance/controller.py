from __future__ import annotations

from flask import Flask, request

from ..common.serializers import attendee_count_json, entry_json, person_json, row_json, search_result_json
from ..common.web import fail, json_body, login_required, ok
from ..container import Container
from ..core.enums import MarkResult
from .session import AttendanceSession

_MARK_STATUS = {
    MarkResult.SUCCESS: 201,
    MarkResult.DUPLICATE: 409,
    MarkResult.FAILURE: 503,
}


def _session_state(session: AttendanceSession) -> dict:
    pending = session.pending_undo
    return {
        "meeting_id": session.meeting_id,
        "date": session.date,
        "entries": [entry_json(e) for e in session.entries],
        "marked_person_ids": sorted(session.marked_person_ids),
        "pending_undo": entry_json(pending) if pending else None,
    }


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _date_arg():
        return request.args.get("date") or json_body().get("date") or None

    @app.route("/api/meetings/<meeting_id>/attendance", methods=["GET"], endpoint="api_attendance")
    @login_required
    def attendance(meeting_id: str):
        return ok(**_session_state(service.session(meeting_id, _date_arg(), refresh=True)))

    @app.route("/api/meetings/<meeting_id>/attendance", methods=["POST"], endpoint="api_attendance_mark")
    @login_required
    def mark(meeting_id: str):
        data = json_body()
        date = _date_arg()
        person_payload = None
        if data.get("person_id"):
            result = service.mark(meeting_id, date, str(data["person_id"]))
        elif data.get("full_name"):
            person, result = service.add_and_mark(
                meeting_id,
                date,
                str(data["full_name"]),
                phone=data.get("phone"),
                notes=data.get("notes"),
            )
            person_payload = person_json(person)
        else:
            return fail("person_id or full_name is required", 400)

        state = _session_state(service.session(meeting_id, date))
        body = {"success": result == MarkResult.SUCCESS, "result": result.value, "person": person_payload, **state}
        if result == MarkResult.DUPLICATE:
            body["message"] = "Already marked for this meeting"
        elif result == MarkResult.FAILURE:
            body["message"] = "Could not save attendance, please try again"
        return body, _MARK_STATUS[result]

    @app.route(
        "/api/meetings/<meeting_id>/attendance/<entry_id>",
        methods=["DELETE"],
        endpoint="api_attendance_remove",
    )
    @login_required
    def remove(meeting_id: str, entry_id: str):
        if not service.remove(meeting_id, _date_arg(), entry_id):
            return fail("Entry not found", 404)
        return ok(**_session_state(service.session(meeting_id, _date_arg())))

    @app.route("/api/meetings/<meeting_id>/attendance/undo", methods=["POST"], endpoint="api_attendance_undo")
    @login_required
    def undo(meeting_id: str):
        restored = service.undo(meeting_id, _date_arg())
        return ok(restored=restored, **_session_state(service.session(meeting_id, _date_arg())))

    @app.route(
        "/api/meetings/<meeting_id>/attendance/dismiss-undo",
        methods=["POST"],
        endpoint="api_attendance_dismiss_undo",
    )
    @login_required
    def dismiss_undo(meeting_id: str):
        dismissed = service.dismiss_undo(meeting_id, _date_arg())
        return ok(dismissed=dismissed, **_session_state(service.session(meeting_id, _date_arg())))

    @app.route("/api/meetings/<meeting_id>/search", methods=["GET"], endpoint="api_attendance_search")
    @login_required
    def search(meeting_id: str):
        results = service.search(meeting_id, _date_arg(), request.args.get("q", ""))
        return ok(results=[search_result_json(r) for r in results])

    @app.route("/api/records/<record_id>", methods=["DELETE"], endpoint="api_record_delete")
    @login_required
    def delete_record(record_id: str):
        service.delete_record(record_id)
        container.roster_service.reload()
        return ok(message="Record deleted")

    @app.route("/api/history/date", methods=["GET"], endpoint="api_history_date")
    @login_required
    def history_date():
        meeting_id = request.args.get("meeting_id", "")
        meeting = service.get_meeting(meeting_id)
        date = request.args.get("date") or service.default_date(meeting)
        rows = service.attendees_on(meeting_id, date)
        return ok(meeting_id=meeting_id, date=date, attendees=[row_json(r) for r in rows])

    @app.route("/api/history/all-time", methods=["GET"], endpoint="api_history_all_time")
    @login_required
    def history_all_time():
        meeting_id = request.args.get("meeting_id", "")
        counts = service.all_time_counts(meeting_id)
        return ok(
            meeting_id=meeting_id,
            attendees=[attendee_count_json(c) for c in counts],
        )

    @app.route("/api/export.csv", methods=["GET"], endpoint="api_export_csv")
    @login_required
    def export_csv():
        return app.response_class(
            service.export_csv().encode("utf-8"),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=attendance_export.csv"},
        )
