from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, list_tables

from .container import Container, build_container
from .admins.controller import register as register_admins
from .attendance.controller import register as register_attendance
from .billing.controller import register as register_billing
from .configuration.controller import register as register_configuration
from .dashboard.controller import register as register_dashboard
from .members.controller import register as register_members

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _configure_logging(settings, debug: bool) -> None:
    level = "DEBUG" if debug else str(getattr(settings, "LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["CRON_SECRET"] = getattr(settings, "CRON_SECRET", "") or ""
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=int(getattr(settings, "SESSION_LIFETIME_DAYS", 7)))
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_SECURE"] = not app.config["DEBUG"] and not app.config["TESTING"]

    _configure_logging(settings, app.config["DEBUG"])
    logger.debug(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.debug("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            rate_limit_backend=str(getattr(settings, "RATE_LIMIT_BACKEND", "mysql")),
            rate_limit_max=int(getattr(settings, "RATE_LIMIT_MAX", 10)),
            rate_limit_window_seconds=int(getattr(settings, "RATE_LIMIT_WINDOW_SECONDS", 60)),
        )

    register_admins(app, container)
    register_configuration(app, container)
    register_members(app, container)
    register_billing(app, container)
    register_attendance(app, container)
    register_dashboard(app, container)

    return app
