from __future__ import annotations

from functools import wraps
from typing import Any

from flask import Flask, current_app, jsonify, request, session

from ..core.exceptions import AuthenticationError, DomainError, NotFoundError, StoreError, ValidationError

AUTH_SESSION_KEY = "authenticated"


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get(AUTH_SESSION_KEY):
            return fail("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def ok(status: int = 200, **data: Any):
    return jsonify({"success": True, **data}), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register_error_handlers(app: Flask) -> None:
    """Map domain and store exceptions onto JSON error responses."""

    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return fail(str(e), 400)

    @app.errorhandler(AuthenticationError)
    def _authentication(e: AuthenticationError):
        return fail(str(e), 401)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return fail(str(e), 404)

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return fail(str(e), 400)

    @app.errorhandler(StoreError)
    def _store(e: StoreError):
        current_app.logger.error("store failure on %s %s: %s", request.method, request.path, e)
        return fail("The attendance store is unavailable, please try again", 503)
