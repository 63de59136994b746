from __future__ import annotations

from flask import Flask

from ..common.serializers import person_json
from ..common.web import fail, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    roster = container.roster_service

    @app.route("/api/people", methods=["GET"], endpoint="api_people")
    @login_required
    def list_people():
        return ok(
            people=[
                {**person_json(p), "attendance_count": roster.index.attendance_count(p.person_id)}
                for p in roster.list_people()
            ]
        )

    @app.route("/api/people", methods=["POST"], endpoint="api_people_create")
    @login_required
    def create_person():
        data = json_body()
        person = roster.add_person(
            str(data.get("full_name", "")),
            phone=data.get("phone"),
            notes=data.get("notes"),
        )
        return ok(201, person=person_json(person))

    @app.route("/api/people/<person_id>", methods=["PUT"], endpoint="api_people_update")
    @login_required
    def update_person(person_id: str):
        data = json_body()
        person = roster.update_person(
            person_id,
            full_name=str(data.get("full_name", "")),
            phone=data.get("phone"),
            notes=data.get("notes"),
        )
        return ok(person=person_json(person))

    @app.route("/api/people/<person_id>", methods=["DELETE"], endpoint="api_people_delete")
    @login_required
    def delete_person(person_id: str):
        roster.delete_person(person_id)
        return ok(message="Person deleted")

    @app.route("/api/people/import", methods=["POST"], endpoint="api_people_import")
    @login_required
    def import_people():
        summary = roster.import_names(str(json_body().get("names", "")))
        return ok(
            added=[person_json(p) for p in summary.added],
            skipped=summary.skipped,
            message=summary.message,
        )

    @app.route("/api/people/<person_id>/merge", methods=["POST"], endpoint="api_people_merge")
    @login_required
    def merge_people(person_id: str):
        target_id = json_body().get("target_id")
        if not target_id:
            return fail("target_id is required", 400)
        moved = roster.merge_people(person_id, str(target_id))
        return ok(moved=moved, target=person_json(roster.get_person(str(target_id))))
