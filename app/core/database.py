"""Database engine construction and session management."""

from collections.abc import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, settings


def build_database_url(cfg: Settings) -> URL:
    """
    Combine DATABASE_URL with the separately supplied driver and credentials.

    DATABASE_DRIVER, DATABASE_USERNAME and DATABASE_PASSWORD, when set, take
    precedence over the matching parts of the URL.
    """
    url = make_url(cfg.DATABASE_URL)
    overrides: dict[str, str] = {}
    if cfg.DATABASE_DRIVER:
        overrides["drivername"] = cfg.DATABASE_DRIVER
    if cfg.DATABASE_USERNAME:
        overrides["username"] = cfg.DATABASE_USERNAME
    if cfg.DATABASE_PASSWORD is not None:
        overrides["password"] = cfg.DATABASE_PASSWORD.get_secret_value()
    if overrides:
        url = url.set(**overrides)
    return url


def enable_sqlite_foreign_keys(sqlite_engine: Engine) -> Engine:
    """SQLite ignores REFERENCES clauses unless each connection turns them on."""

    @event.listens_for(sqlite_engine, "connect")
    def _set_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


def make_engine(cfg: Settings) -> Engine:
    url = build_database_url(cfg)
    if url.get_backend_name() == "sqlite":
        # In-memory SQLite must share one connection across threads.
        return enable_sqlite_foreign_keys(
            create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=cfg.DEBUG,
            )
        )
    return create_engine(url, pool_pre_ping=True, echo=cfg.DEBUG)


engine = make_engine(settings)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
