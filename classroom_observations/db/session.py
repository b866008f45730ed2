from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def build_engine(database_url: str) -> Engine:
    """Create an engine for the configured database."""
    url = make_url(database_url)
    connect_args = {}
    engine_kwargs = {}
    backend = url.get_backend_name()
    if backend.startswith("postgresql"):
        connect_args["options"] = "-c timezone=utc"
    elif backend == "sqlite":
        connect_args["check_same_thread"] = False
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every checkout sees an empty DB
            engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(
        url, pool_pre_ping=True, connect_args=connect_args, **engine_kwargs
    )

    if backend == "sqlite":
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create all tables (no migration tooling in this service)."""
    from classroom_observations.db import models  # noqa: F401
    from classroom_observations.db.base import Base

    Base.metadata.create_all(bind=engine)
