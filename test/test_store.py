"""
SQL play-state store on an in-memory SQLite database.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from boardwise.api.database import init_db
from boardwise.api.models import PlayState
from boardwise.api.store import PlayStateStore
from boardwise.engine.errors import PersistenceUnavailable
from boardwise.engine.persistence import storage_key


def memory_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def session_factory():
    engine = memory_engine()
    init_db(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def test_save_load_clear(session_factory):
    store = PlayStateStore(session_factory)
    assert store.load("b1") is None

    store.save("b1", {"gameStatus": "playing", "players": []})
    store.save("b1", {"gameStatus": "finished", "players": []})
    assert store.load("b1") == {"gameStatus": "finished", "players": []}

    store.clear("b1")
    assert store.load("b1") is None


def test_corrupt_payload_is_treated_as_absent(session_factory):
    db = session_factory()
    db.add(PlayState(key=storage_key("b2"), board_id="b2", payload="{not json"))
    db.commit()
    db.close()

    assert PlayStateStore(session_factory).load("b2") is None


def test_missing_tables_raise_persistence_unavailable():
    store = PlayStateStore(sessionmaker(bind=memory_engine()))
    with pytest.raises(PersistenceUnavailable):
        store.save("b3", {"gameStatus": "playing"})
    with pytest.raises(PersistenceUnavailable):
        store.load("b3")
