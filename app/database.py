from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import get_settings

# This file holds the engine, the session factory and the request-scoped
# session dependency.


class Base(DeclarativeBase):
    pass


def make_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, echo=echo, **kwargs)
    if url.startswith("sqlite"):
        # sqlite ignores ON DELETE CASCADE unless foreign keys are switched on
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    return engine


_settings = get_settings()
engine = make_engine(_settings.database_url, echo=_settings.database_echo)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(bind: Engine = engine) -> None:
    # models must be imported so their tables are registered on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind)


def get_session() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
