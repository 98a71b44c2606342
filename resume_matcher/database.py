from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from resume_matcher.core.config import settings

DATABASE_URL = settings.database_url


def build_engine(url: str) -> Engine:
    """PostgreSQL gets a pre-pinged pool; SQLite is shared across the upload threadpool."""
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(DATABASE_URL)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # Blob chunk rows rely on ON DELETE CASCADE, which SQLite ignores unless asked
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    One session per request. Services own their commits and rollbacks.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create the user, resume, match and blob tables. Called once from the app lifespan."""
    from resume_matcher.models import user, resume, match, stored_blob  # noqa: F401
    Base.metadata.create_all(bind=engine)
