"""
Application lifecycle event handlers.

Opens the relational store client at startup and closes it at shutdown.
"""

from typing import Callable

import structlog
from fastapi import FastAPI

from core.config import settings
from db.session import Database

logger = structlog.get_logger(__name__)


def create_start_app_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info("app_starting", app=settings.APP_NAME, env=settings.APP_ENV)

        # A store client may already be attached (tests, embedding apps)
        database = getattr(app.state, "database", None)
        if database is None:
            database = Database(settings.database_url, echo=settings.DB_ECHO)
            database.open()
            app.state.database = database

        if settings.DB_CREATE_TABLES:
            await database.create_all()
            logger.info("database_tables_created")

        logger.info("app_started")

    return start_app


def create_stop_app_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("app_stopping")

        database = getattr(app.state, "database", None)
        if database is not None:
            await database.close()
            app.state.database = None

        logger.info("app_stopped")

    return stop_app
