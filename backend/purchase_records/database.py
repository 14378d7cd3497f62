import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from purchase_records.config import settings

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str) -> Engine:
    """Build an engine for the configured store (PostgreSQL by default, SQLite accepted)"""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # FastAPI may hand a session to a different worker thread than the one that opened it
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)


engine = create_db_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def masked_database_url(database_url: str) -> str:
    """Render a connection string safe for logs"""
    return make_url(database_url).render_as_string(hide_password=True)


def init_db(bind: Engine = engine) -> None:
    """
    Verify the store is reachable and create the purchase_orders table if missing.

    Raises whatever the driver raises on connection failure; the caller decides
    whether that is fatal.
    """
    # Register models on Base.metadata before create_all
    import purchase_records.models  # noqa: F401

    with bind.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info(f"Store connected: {masked_database_url(str(bind.url))}")

    Base.metadata.create_all(bind=bind)


def dispose_db(bind: Engine = engine) -> None:
    bind.dispose()
    logger.info("Store connection pool disposed")


def get_db():
    """FastAPI dependency yielding one session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
