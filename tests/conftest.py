from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


@pytest.fixture(scope="session")
def app(tmp_path_factory: pytest.TempPathFactory):
    tmp_dir = tmp_path_factory.mktemp("runtime")
    db_path = tmp_dir / "signaling_test.db"

    # Must be set before importing modules that create the SQLAlchemy engine.
    os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{db_path.as_posix()}"
    os.environ["DATA_DIR"] = str(tmp_dir)
    # Ensure tests can rely on the schema existing without running Alembic.
    os.environ["AUTO_CREATE_DB_SCHEMA"] = "true"
    os.environ["RECORD_CALL_HISTORY"] = "true"

    import importlib

    # Ensure clean import with the test DB settings.
    for module_name in [
        "config.settings",
        "db.base",
        "db.models",
        "db.repository",
        "api.dependencies",
        "api.routes",
        "api.signaling_routes",
        "main",
    ]:
        sys.modules.pop(module_name, None)

    main = importlib.import_module("main")
    return main.app


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def state():
    from signaling.state import SignalingState

    signaling_state = SignalingState()
    signaling_state.start()
    yield signaling_state
    signaling_state.stop()


@pytest.fixture()
def relay(state):
    from signaling.relay import SignalRelay

    return SignalRelay(state)
