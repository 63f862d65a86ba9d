# tracker/storage/db.py
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from core.settings import DB_PATH, SEED

# Ensure SQLModel metadata is populated
import models.activity_log  # noqa: F401
import models.directory  # noqa: F401
import models.sync_state  # noqa: F401
from storage import migrations
from storage.seed import seed_if_empty


def make_engine(url: str) -> Engine:
    engine = create_engine(url, echo=False, connect_args={"check_same_thread": False})
    event.listen(engine, "connect", _configure_sqlite)
    return engine


def _configure_sqlite(dbapi_connection, connection_record) -> None:
    # WAL lets report readers proceed while the poller writes
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


_engine = make_engine(f"sqlite:///{DB_PATH.as_posix()}")


def init_db(engine: Engine | None = None, *, seed: bool | None = None) -> Engine:
    target = engine or _engine
    if target is _engine:
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(target)
    migrations.run_all(target)
    if seed is None:
        seed = SEED.enabled
    if seed:
        seed_if_empty(lambda: Session(target))
    return target


def get_engine():
    return _engine


def get_session() -> Session:
    return Session(_engine)
