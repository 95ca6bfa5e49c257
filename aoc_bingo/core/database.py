import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from aoc_bingo.core.config import settings
from aoc_bingo.core.exceptions import StorageFailed

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}


def configure_sqlite(engine: Engine) -> Engine:
    """
    Make SQLite behave like the server databases we rely on.

    Foreign keys are enforced, and every transaction starts with
    BEGIN IMMEDIATE so a check followed by a write in the same transaction
    cannot interleave with another writer. SQLite ignores FOR UPDATE.
    """
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Stop pysqlite from issuing its own deferred BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=connect_args,
    echo=settings.DEBUG
)
if engine.dialect.name == "sqlite":
    configure_sqlite(engine)

# Objects stay readable after the transaction that loaded them closes
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
Base = declarative_base()

SessionFactory = Callable[[], Session]


@contextmanager
def transaction(session_factory: SessionFactory) -> Iterator[Session]:
    """
    Run a block against one pooled connection as a single transaction.

    Commits when the block finishes, rolls back on any error and always
    returns the connection to the pool. Driver errors surface as StorageFailed.
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Transaction rolled back: {e}")
        raise StorageFailed(str(e)) from e
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
