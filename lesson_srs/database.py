from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from lesson_srs.config import get_settings

Base = declarative_base()


def make_engine(database_url: str, echo: bool = False, **engine_kwargs) -> Engine:
    """Create an engine; SQLite connections get foreign keys switched on so cascades fire."""
    connect_args = engine_kwargs.pop("connect_args", {})
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine = create_engine(database_url, echo=echo, connect_args=connect_args, **engine_kwargs)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


settings = get_settings()
engine = make_engine(settings.database_url, echo=settings.echo_sql)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(bind: Engine = None):
    """Create all tables"""
    # Register models on Base.metadata before create_all
    import lesson_srs.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def drop_db(bind: Engine = None):
    """Drop all tables"""
    import lesson_srs.models  # noqa: F401

    Base.metadata.drop_all(bind=bind or engine)
