"""
Shared fixtures: a throwaway store with one populated session, and an API client
"""
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient

from audition.config import CONFIG_ENV_VAR
from audition.core import lifecycle
from audition.core.realtime import ChangeFeed
from audition.core.store import Store
from audition.models import Dancer, Judge, Material, Session
from audition.services import sessions as session_service


@pytest.fixture
def feed() -> ChangeFeed:
    return ChangeFeed()


@pytest.fixture
def store(tmp_path, feed) -> Store:
    return Store(str(tmp_path / "audition.sqlite"), feed=feed)


@pytest.fixture
def session(store) -> Session:
    return session_service.create_session(store, "Spring Audition", "2026-05-01", "123456", "spring-26")


@pytest.fixture
def dancers(store, session) -> List[Dancer]:
    return [
        session_service.add_dancer(store, session.id, 101, "Ava Chen", 10),
        session_service.add_dancer(store, session.id, 102, "Liam Ortiz", 11),
        session_service.add_dancer(store, session.id, 103, "Mia Patel"),
    ]


@pytest.fixture
def materials(store, session) -> List[Material]:
    return [
        session_service.add_material(store, session.id, "Ballet"),
        session_service.add_material(store, session.id, "Jazz"),
    ]


@pytest.fixture
def judges(store, session) -> List[Judge]:
    return [
        session_service.add_judge(store, session.id, name)["judge"]
        for name in ("Judge A", "Judge B", "Judge C")
    ]


@pytest.fixture
def template(store, session, dancers):
    return lifecycle.create_template(store, session.id, 1, [d.id for d in dancers])


@pytest.fixture
def instance(store, template, materials):
    """Template 1 pushed against Ballet"""
    return lifecycle.push_group(store, template.id, materials[0].id)


@pytest.fixture
def client(tmp_path, monkeypatch):
    """API client backed by a fresh database"""
    config_file = tmp_path / "settings.yaml"
    config_file.write_text(
        f"database_path: {tmp_path / 'api.sqlite'}\n"
        "log_level: DEBUG\n"
        "token_ttl_hours: 1\n",
        encoding="utf-8",
    )
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

    from audition.main import app
    with TestClient(app) as client:
        yield client


@pytest.fixture
def api_session(client) -> Dict:
    """Session created over HTTP plus an admin token for it"""
    created = client.post("/sessions", json={
        "name": "Spring Audition", "date": "2026-05-01",
        "adminPin": "123456", "sessionCode": "SPRING-26",
    })
    assert created.status_code == 201
    session = created.json()

    login = client.post("/auth/login", json={"sessionId": "spring-26", "pin": "123456", "role": "admin"})
    assert login.status_code == 200
    return {
        "id": session["id"],
        "admin_headers": {"Authorization": f"Bearer {login.json()['token']}"},
    }
