"""
Database connection setup and transaction scope.

Every repository function takes the ``Session`` it should run on as its
first argument. ``transaction(db)`` turns a block of repository calls on
that session into one atomic unit.
"""
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import settings

logger = logging.getLogger(__name__)

_IN_TRANSACTION = "in_transaction"


def create_db_engine(url: str, **kwargs) -> Engine:
    """Build an engine with the connection settings the schema relies on."""
    if url.startswith("sqlite"):
        # SQLite 사용 시 check_same_thread=False 필요
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine = create_engine(url, connect_args=connect_args, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    kwargs.setdefault("isolation_level", "READ COMMITTED")
    return create_engine(url, pool_pre_ping=True, **kwargs)


engine = create_db_engine(settings.DATABASE_URL, echo=settings.DEBUG)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """데이터베이스 세션 의존성"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def in_transaction(db: Session) -> bool:
    return bool(db.info.get(_IN_TRANSACTION))


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run the enclosed block as one transaction on *db*.

    Commits when the block exits normally and rolls back when it raises;
    the exception always propagates. A nested ``transaction`` on a session
    that is already inside one joins the outer transaction: it neither
    commits nor rolls back, leaving that to the outermost scope.
    """
    if in_transaction(db):
        yield db
        return

    db.info[_IN_TRANSACTION] = True
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise
    finally:
        db.info.pop(_IN_TRANSACTION, None)
