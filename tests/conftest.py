import os, sys

import pytest

# Ensure project root in path
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from config import TailConfig
from server import create_app


@pytest.fixture()
def log_file(tmp_path):
    path = tmp_path / "app.log"
    path.write_bytes(b"AAAA\nBBBB\n")
    return path


@pytest.fixture()
def make_config(tmp_path):
    def _make(**overrides):
        overrides.setdefault("TMPDIR", str(tmp_path))
        overrides.setdefault("SECRET_KEY", "test-secret")
        overrides.setdefault("LOG_DIR", "")
        overrides.setdefault("FILES", {})
        return TailConfig(**overrides)
    return _make


@pytest.fixture()
def app(make_config, log_file, tmp_path):
    config = make_config(
        ALLOW_USER_DEFINED=True,
        FILES={
            "app": {"heading": "App Log", "file": str(log_file)},
            "broken": {"heading": "No Path", "file": ""},
            "gone": {"heading": "Deleted", "file": str(tmp_path / "missing.log")},
        },
    )
    app = create_app(config)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app):
    return app.test_client()
