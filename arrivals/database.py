# arrivals/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy. Only the authorized-admin allow-list lives here; the active
billboard is process memory (see services/billboard_store.py).
"""

from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from arrivals.config import settings
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}, "echo": False}
        # In-memory SQLite must share one connection or every session sees an empty DB
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs
    return {
        "pool_pre_ping": True,   # Auto-reconnect if DB connection drops
        "pool_size": 5,
        "max_overflow": 10,
        "echo": False,
    }


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Creates all DB tables on startup. Safe to call multiple times."""
    from arrivals.models.authorized_user import AuthorizedUser   # noqa

    Base.metadata.create_all(bind=engine)


def seed_authorized_users(user_ids: list) -> int:
    """Insert any configured admin ids that are not yet on the allow-list."""
    from arrivals.models.authorized_user import AuthorizedUser
    from datetime import datetime

    if not user_ids:
        return 0
    db = SessionLocal()
    try:
        existing = {row.user_id for row in db.query(AuthorizedUser.user_id).all()}
        added = 0
        for user_id in user_ids:
            if user_id in existing:
                continue
            db.add(AuthorizedUser(user_id=user_id, added_at=datetime.utcnow(), source="env"))
            added += 1
        db.commit()
        if added:
            logger.info(f"Seeded {added} authorized user(s) from AUTHORIZED_USERS")
        return added
    finally:
        db.close()
