"""Pytest configuration and fixtures for editwise tests."""

import tempfile
from pathlib import Path
from typing import Iterator

import pytest

from editwise.config import Config, SessionSettings


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_python_file(temp_dir: Path) -> Path:
    """Create a four-line Python file for edit tests."""
    file_path = temp_dir / "sample.py"
    file_path.write_text("a = 1\nb = 2\nc = 3\nd = 4")
    return file_path


@pytest.fixture
def sample_config(temp_dir: Path) -> Config:
    """Create a sample Config object for testing."""
    return Config(
        project_root=temp_dir,
        config_dict={
            "confidence_threshold": 80,
            "backup": False,
            "exclude_dirs": ["build"],
            "llm": {"api_url": "http://localhost:8000", "model": "test-model"},
        },
    )


@pytest.fixture
def pyproject_toml(temp_dir: Path) -> Path:
    """Create a sample pyproject.toml file."""
    config_path = temp_dir / "pyproject.toml"
    config_path.write_text(
        """[tool.editwise]
confidence_threshold = 75
exclude_dirs = ["vendor"]

[tool.editwise.llm]
api_url = "http://localhost:8000"
model = "local-model"
temperature = 0.1
"""
    )
    return config_path


@pytest.fixture
def session_settings(temp_dir: Path) -> SessionSettings:
    return SessionSettings(model="stub", working_directory=temp_dir)


@pytest.fixture(autouse=True)
def clean_llm_env(monkeypatch):
    """Keep developer EDITWISE_* variables out of the tests."""
    for key in (
        "EDITWISE_LLM_API_URL",
        "EDITWISE_LLM_MODEL",
        "EDITWISE_LLM_API_KEY",
        "EDITWISE_LLM_TEMPERATURE",
        "EDITWISE_LLM_MAX_TOKENS",
        "EDITWISE_LLM_TIMEOUT",
    ):
        monkeypatch.delenv(key, raising=False)
