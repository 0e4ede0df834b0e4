from __future__ import annotations

import logging
import threading

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from placement.config import settings


log = logging.getLogger(__name__)

Base = declarative_base()


def make_engine(url: str, **kwargs) -> Engine:
    connect_args = kwargs.pop("connect_args", {})
    if make_url(url).get_backend_name().startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)
    return create_engine(url, connect_args=connect_args, future=True, **kwargs)


def make_session_factory(bind: Engine) -> sessionmaker:
    # Entities outlive the unit of work that loaded them.
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, expire_on_commit=False)


engine = make_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = make_session_factory(engine)


def init_db(bind: Engine | None = None) -> None:
    from placement import models  # noqa: F401

    target = bind or engine
    Base.metadata.create_all(bind=target)
    log.info("Database ready at %s", target.url.render_as_string(hide_password=True))


_store = None
_store_lock = threading.Lock()


def get_store():
    """FastAPI dependency returning the process-wide collection store.

    The store owns the entity lock registry, so there must be exactly one.
    """
    global _store
    with _store_lock:
        if _store is None:
            from placement.services.store import CollectionStore

            _store = CollectionStore(SessionLocal)
        return _store
