from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .bookings.controller import register as register_bookings
from .common.http import install_http_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_demo_data, list_tables
from .offices.controller import register as register_offices
from .reservations.controller import register as register_reservations
from .rooms.controller import register as register_rooms
from .sessions.controller import register as register_sessions
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the API app.

    With no ``container`` the MySQL-backed one is built from the settings
    module (and the schema / demo data applied when enabled). Tests pass a
    container wired on in-memory repositories instead.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_data(db_config)

        container = build_container(
            db_config=db_config,
            session_hours=int(getattr(settings, "SESSION_HOURS", 8)),
        )

    install_http_handlers(app, cors_allow_origin=str(getattr(settings, "CORS_ALLOW_ORIGIN", "*")))

    register_sessions(app, container)
    register_users(app, container)
    register_rooms(app, container)
    register_offices(app, container)
    register_bookings(app, container)
    register_reservations(app, container)

    return app
