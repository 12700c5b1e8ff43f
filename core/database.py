from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
from typing import Generator, Iterator
import logging
import threading

from core.config import settings

logger = logging.getLogger(__name__)

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


# ============================================================
# ✅ Create SQLModel engine
# ============================================================
def build_engine(database_url: str):
    """
    Build an engine for the given URL.
    In-memory SQLite has a single shared connection (StaticPool), so
    sessions on such an engine are taken one at a time, see session_scope.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False, "timeout": 30}}
        if database_url in IN_MEMORY_URLS:
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, **kwargs)

    # For PostgreSQL, pool_pre_ping avoids stale connections
    return create_engine(database_url, echo=False, pool_pre_ping=True)


def is_shared_connection(bind) -> bool:
    return isinstance(bind.pool, StaticPool)


engine = build_engine(settings.DATABASE_URL)

if settings.DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite record store: %s", settings.DATABASE_URL)
else:
    logger.info("Using database from environment")

# Plain Lock: a request may enter and leave its session on different threads
_shared_connection_lock = threading.Lock()


# ============================================================
# ✅ Create tables (called at startup)
# ============================================================
def create_db_and_tables(bind=None) -> None:
    """
    Create the record store tables (accounts, organizations, plans, staff,
    receipts, billing entries, email claims, revoked sessions).
    """
    import models.models  # noqa: F401  (registers tables on the metadata)

    try:
        SQLModel.metadata.create_all(bind or engine)
        logger.info("✅ Record store tables ready.")
    except Exception as e:
        logger.error(f"❌ Could not create record store tables: {e}")
        raise


# ============================================================
# ✅ Session scope
# ============================================================
@contextmanager
def session_scope(bind=None) -> Iterator[Session]:
    """
    Open a session on `bind` (the app engine by default).

    When the engine runs on one shared connection, the session holds a
    process wide lock until it closes. Otherwise two sessions would share a
    transaction and one closing would roll back what the other flushed.
    """
    bind = bind or engine
    if not is_shared_connection(bind):
        with Session(bind) as session:
            yield session
        return

    with _shared_connection_lock:
        with Session(bind) as session:
            yield session


# ============================================================
# ✅ Dependency: FastAPI session generator
# ============================================================
def get_session() -> Generator[Session, None, None]:
    """
    One session per request; the record store wraps it.
    Closed when the response has been sent.
    """
    with session_scope() as session:
        yield session
