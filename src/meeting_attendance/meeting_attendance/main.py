from __future__ import annotations

import atexit
import importlib
import logging
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .database.connection import DBConfig

from .common.web import register_error_handlers
from .container import build_container
from .access.controller import register as register_access
from .attendance.controller import register as register_attendance
from .meetings.controller import register as register_meetings
from .people.controller import register as register_people
from .settings.controller import register as register_settings
from .stats.controller import register as register_stats

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=30)

    log_level = str(getattr(settings, "LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(log_level)
    app.logger.info("settings=%s db=%s", settings_module, DBConfig.from_mapping(db_config).describe())

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        app.logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        app.logger.info("default meetings seeded")

    container = build_container(
        db_config=db_config,
        undo_seconds=float(getattr(settings, "UNDO_WINDOW_SECONDS", 4)),
    )
    container.roster_service.reload()
    # Commit removals still waiting out their undo window.
    atexit.register(container.attendance_service.close_all)

    register_error_handlers(app)
    register_access(app, container)
    register_meetings(app, container)
    register_attendance(app, container)
    register_people(app, container)
    register_stats(app, container)
    register_settings(app, container)

    return app
