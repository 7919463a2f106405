"""
Database setup for BoardWise.
Uses SQLite locally; set DATABASE_URL (e.g. Postgres) for production.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from boardwise.config import DATABASE_URL

# SQLite needs check_same_thread=False; Postgres does not use that arg
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind=None):
    """Create all tables."""
    from boardwise.api import models  # noqa: F401  (register tables)
    Base.metadata.create_all(bind=bind or engine)
