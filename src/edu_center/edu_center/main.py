from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .core.constants import DEFAULT_COMMIT_CONCURRENCY
from .database.bootstrap import apply_schema, list_tables
from .ledger.controller import register as register_ledger
from .statistics.controller import register as register_statistics

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    db_config = getattr(settings, "DB_CONFIG")

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    container = build_container(
        db_config=db_config,
        commit_concurrency=int(getattr(settings, "LEDGER_COMMIT_CONCURRENCY", DEFAULT_COMMIT_CONCURRENCY)),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(container.conn, schema_path=schema_path)
        logger.info("schema ready (tables=%d)", len(list_tables(container.conn)))

    register_ledger(app, container)
    register_statistics(app, container)

    return app
