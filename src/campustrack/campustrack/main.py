from __future__ import annotations

import importlib
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .analytics.controller import register as register_analytics
from .attendance.controller import register as register_attendance
from .common.app_logging import configure_logging, get_logger
from .common.http import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .mdc.controller import register as register_mdc
from .timetable.controller import register as register_timetable

_logger = get_logger("campustrack.app")

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Container | None = None) -> Flask:
    """Application factory.

    Tests pass a prebuilt container; otherwise one is wired against the
    database from the selected settings module.
    """

    load_dotenv(override=False)
    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", None))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        _logger.info(
            "starting",
            extra={
                "settings": settings_module,
                "db": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
            },
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            _logger.info("schema ready", extra={"tables": len(list_tables(db_config))})
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")

        container = build_container(
            db_config=db_config,
            analytics={
                "window_days": getattr(settings, "ANALYTICS_WINDOW_DAYS", 30),
                "low_attendance_limit": getattr(settings, "LOW_ATTENDANCE_LIMIT", 10),
                "recent_days": getattr(settings, "RECENT_SESSIONS_DAYS", 7),
                "recent_limit": getattr(settings, "RECENT_SESSIONS_LIMIT", 10),
            },
        )

    register_error_handlers(app)
    register_analytics(app, container)
    register_attendance(app, container)
    register_timetable(app, container)
    register_mdc(app, container)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    return app
