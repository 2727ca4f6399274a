import logging

from fastapi import Request

from app.core.config import Settings
from app.repositories.base import Repository
from app.repositories.json_repository import JsonRepository
from app.repositories.sql_repository import SqlRepository

logger = logging.getLogger(__name__)

__all__ = ["Repository", "JsonRepository", "SqlRepository", "build_repository", "get_repository"]


def build_repository(settings: Settings, engine=None) -> Repository:
    if settings.repository_backend == "json":
        logger.info("Using JSON repository at %s", settings.data_json_path or "<memory>")
        return JsonRepository(settings.data_json_path)
    if settings.repository_backend != "sql":
        raise ValueError(f"Unknown REPOSITORY_BACKEND: {settings.repository_backend!r}")

    from app.database import build_engine, create_db_and_tables

    engine = engine or build_engine(settings)
    create_db_and_tables(engine)
    return SqlRepository(engine)


def get_repository(request: Request) -> Repository:
    return request.app.state.repository
