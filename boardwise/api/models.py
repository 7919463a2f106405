"""
SQLAlchemy models for saved play state.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text

from .database import Base


class PlayState(Base):
    __tablename__ = "play_states"

    key = Column(String(160), primary_key=True)  # <prefix>-play-state-<board_id>
    board_id = Column(String(64), nullable=False, index=True)
    payload = Column(Text, nullable=False)  # JSON of the persisted play state
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
