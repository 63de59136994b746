from __future__ import annotations

from flask import Flask, current_app, session

from ..common.web import AUTH_SESSION_KEY, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        # AuthenticationError is mapped to 401 by the error handlers.
        container.access_service.login(str(data.get("access_key", "")))
        session.permanent = bool(data.get("remember"))
        session[AUTH_SESSION_KEY] = True
        current_app.logger.info("access granted")
        return ok(message="Signed in")

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.pop(AUTH_SESSION_KEY, None)
        return ok(message="Signed out")
