from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from filebox.core.config import Settings
from filebox.core.security import create_access_token
from filebox.main import create_app
from filebox.services.file_service import Filebox

SECRET = "test-secret"


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    root = tmp_path / "data"
    root.mkdir()
    return root


@pytest.fixture
def box(base_dir: Path) -> Filebox:
    return Filebox(base_dir)


@pytest.fixture
def make_client(base_dir: Path):
    """Build a TestClient around *base_dir* with setting overrides."""

    def _make(**overrides) -> TestClient:
        app_settings = Settings(BASE_DIR=str(base_dir), SECRET_KEY=SECRET, **overrides)
        return TestClient(create_app(app_settings), follow_redirects=False)

    return _make


@pytest.fixture
def token_for():
    def _token(*roles: str, sub: str = "tester") -> str:
        return create_access_token({"sub": sub, "role_names": list(roles)}, secret_key=SECRET)

    return _token
