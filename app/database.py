from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from app.core.config import Settings


def build_engine(settings: Settings):
    connect_args = {}
    kwargs = {}
    if settings.database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if ":memory:" in settings.database_url or settings.database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
    return create_engine(
        settings.database_url,
        echo=settings.database_echo,  # echo=True logs every query
        connect_args=connect_args,
        **kwargs,
    )


def create_db_and_tables(engine):
    import app.models  # noqa: F401  registers the tables on the metadata
    SQLModel.metadata.create_all(engine)
