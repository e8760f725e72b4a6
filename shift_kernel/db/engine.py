"""
Module: shift_kernel.db.engine
Responsibility: Process-wide SQLAlchemy engine, session factory and
    unit-of-work scope.  The only place database connections are configured.
Architecture position: Kernel > DB.  Imports models only inside
    create_tables(), so Base.metadata knows every table.

Invariants enforced:
    - PostgreSQL in production: QueuePool with pre-ping, READ COMMITTED,
      and row locks (FOR UPDATE) taken by the settlement service so a
      shift is settled at most once.
    - SQLite in tests: one shared StaticPool connection so an in-memory
      database survives across sessions.

Failure modes:
    - RuntimeError from get_engine/get_session before init_engine_from_url().
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from shift_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Engine not initialized. Call init_engine_from_url() first."


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create the process-wide engine and session factory.

    ``sqlite://`` URLs get a single shared connection (StaticPool), which
    keeps an in-memory database alive for the whole test session.  Any
    other URL is treated as PostgreSQL: pooled, pre-pinged, READ COMMITTED.
    Calling it again replaces the previous engine without disposing it.
    """
    global _engine, _SessionFactory

    if database_url.startswith("sqlite"):
        engine_options = {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    else:
        engine_options = {
            "poolclass": QueuePool,
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_pre_ping": True,
            "pool_timeout": pool_timeout,
            "pool_recycle": pool_recycle,
            "isolation_level": "READ COMMITTED",
        }

    _engine = create_engine(database_url, echo=echo, **engine_options)
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info("engine_initialized", extra={
        "dialect": _engine.dialect.name,
        "echo": echo,
    })
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session() -> Session:
    """New session from the process-wide factory."""
    if _SessionFactory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _SessionFactory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Unit of work: commit on success, roll back and re-raise on error.

    Usage:
        with session_scope() as session:
            ShiftSettlementService(session, clock).close_shift(...)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create every table registered by ``shift_kernel.models``."""
    from shift_kernel.db.base import Base
    import shift_kernel.models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(get_engine())


def drop_tables() -> None:
    from shift_kernel.db.base import Base

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory (test cleanup)."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None
