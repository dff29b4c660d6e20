# bemanning/database/database.py
"""
SQLAlchemy database setup and models.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from bemanning.core.config import DATABASE_URL

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StateSnapshot(Base):
    """
    Ett komplett state-träd.

    Varje sparning skapar en ny rad (hela trädet ersätts, aldrig delvis
    uppdatering). Den senaste raden är gällande state.
    """

    __tablename__ = "state_snapshots"

    id = Column(Integer, primary_key=True, index=True)
    schema_version = Column(String, nullable=False)
    state = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=_utcnow, index=True)

    def __repr__(self):
        return f"<StateSnapshot(id={self.id}, schema_version={self.schema_version}, created_at={self.created_at})>"


def create_tables():
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
