"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator
from pathlib import Path

import pytest

os.environ.setdefault("ENV", "test")

from fastapi.testclient import TestClient  # noqa: E402

from cds_gateway.core.config import Settings  # noqa: E402
from cds_gateway.main import create_app  # noqa: E402
from tests.factories import FakeClock, hook_json, library_json, write_json  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock starting at t=100."""
    return FakeClock()


@pytest.fixture
def library_tree(tmp_path: Path) -> Path:
    """Two versions of library X in separate subdirectories."""
    root = tmp_path / "libraries"
    write_json(root / "a" / "lib-X-1.0.0.json", library_json("X", "1.0.0"))
    write_json(root / "b" / "lib-X-2.0.0.json", library_json("X", "2.0.0"))
    return root


@pytest.fixture
def hooks_dir(tmp_path: Path) -> Path:
    """Directory with a single hook definition."""
    root = tmp_path / "hooks"
    write_json(root / "x-check.json", hook_json("x-check"))
    return root


@pytest.fixture
def test_settings(library_tree: Path, hooks_dir: Path) -> Settings:
    """Settings pointing at the temporary content directories."""
    return Settings(
        env="test",
        libraries_path=library_tree,
        hooks_path=hooks_dir,
        library_check_interval_seconds=0,
    )


@pytest.fixture
def client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """Create FastAPI test client with content loaded from tmp directories."""
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client
