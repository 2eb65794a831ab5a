"""
Database engine + session factory.

Always initializes: defaults to SQLite for local dev, Postgres in production.
get_session() always returns a real session.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from disposition_router.config import DATABASE_URL


class Base(DeclarativeBase):
    pass


# Hosted Postgres providers hand out postgres:// but SQLAlchemy 2.x requires postgresql://
url = DATABASE_URL.replace('postgres://', 'postgresql://', 1)

if url.startswith('sqlite'):
    engine = create_engine(url, connect_args={'check_same_thread': False})
else:
    engine = create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)

SessionLocal = sessionmaker(bind=engine)


def get_session():
    """Return a new DB session."""
    return SessionLocal()


def import_models():
    """Import every model module so Base.metadata knows about all tables."""
    import importlib
    for name in (
        'lead', 'disposition', 'dnc', 'workflow', 'pipeline',
        'call_log', 'appointment', 'phone_number', 'reachability_event',
        'disposition_metric',
    ):
        importlib.import_module(f'disposition_router.models.{name}')


def new_id():
    """UUID string primary key."""
    return str(uuid.uuid4())


def utcnow():
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(value):
    """Normalize to UTC: naive values (as read back from SQLite) are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
