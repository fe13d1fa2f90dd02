import os
import sys
import tempfile

import pytest

# Ensure the project modules are importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Point the app at a throwaway database before it is imported
_db_dir = tempfile.mkdtemp(prefix="hashify-tests-")
os.environ["HASHIFY_DB_FILE"] = os.path.join(_db_dir, "hashify.db")
os.environ.setdefault("APP_SECRET_KEY", "test-secret")

from app import app as flask_app, get_db


@pytest.fixture(autouse=True)
def _reset_history():
    conn = get_db()
    try:
        conn.execute("DELETE FROM hash_history")
        conn.commit()
    finally:
        conn.close()
    yield


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
