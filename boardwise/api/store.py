"""
SQL-backed play-state store.
Keyed by <prefix>-play-state-<board_id>; storage failures surface as
PersistenceUnavailable so callers can carry on without resumability.
"""

import json
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from boardwise.engine.errors import PersistenceUnavailable
from boardwise.engine.persistence import storage_key

from .database import SessionLocal
from .models import PlayState

logger = logging.getLogger(__name__)


class PlayStateStore:
    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def load(self, board_id: str) -> dict[str, Any] | None:
        db = self.session_factory()
        try:
            row = db.get(PlayState, storage_key(board_id))
            if row is None:
                return None
            payload = row.payload
        except SQLAlchemyError as e:
            raise PersistenceUnavailable(f"Cannot read play state: {e}") from e
        finally:
            db.close()
        try:
            data = json.loads(payload)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt play state for board %s", board_id)
            return None
        return data if isinstance(data, dict) else None

    def save(self, board_id: str, payload: dict[str, Any]) -> None:
        db = self.session_factory()
        try:
            key = storage_key(board_id)
            row = db.get(PlayState, key)
            if row is None:
                row = PlayState(key=key, board_id=board_id, payload="")
                db.add(row)
            row.payload = json.dumps(payload, ensure_ascii=False)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceUnavailable(f"Cannot save play state: {e}") from e
        finally:
            db.close()

    def clear(self, board_id: str) -> None:
        db = self.session_factory()
        try:
            db.query(PlayState).filter(PlayState.key == storage_key(board_id)).delete()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceUnavailable(f"Cannot clear play state: {e}") from e
        finally:
            db.close()
