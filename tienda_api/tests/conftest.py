import sys
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture()
def tmp_db_path(tmp_path, monkeypatch):
    path = tmp_path / "tienda_test.sqlite"
    # Point the app to this temp DB, and ignore any local config.yaml
    monkeypatch.setenv("DB_FILE", str(path))
    monkeypatch.setenv("TIENDA_CONFIG", str(tmp_path / "missing.yaml"))
    return str(path)


@pytest.fixture()
def db(tmp_db_path):
    from tienda_api.db import Database
    from tienda_api.logs import ensure_log_schema
    from tienda_api.repository import producto_repo
    database = Database(tmp_db_path).open()
    producto_repo.ensure_schema(database)
    ensure_log_schema(database)
    yield database
    database.close()


@pytest.fixture()
def client(tmp_db_path):
    # Import app after DB path is set so the startup hook opens the temp DB
    from tienda_api.api import app
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
