"""Configuration loading for editwise.

Reads settings from the [tool.editwise] section of the nearest pyproject.toml.
The raw table is exposed through ``Config``; typed views (``LLMConfig``,
``EditSettings``, ``SessionSettings``) apply defaults and environment
overrides so callers receive explicit values instead of re-reading files.

editwise/src/editwise/config.py
"""

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from dotenv import load_dotenv

from editwise.errors import ConfigurationError
from editwise.utils import walk_up_for_config

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

__all__ = [
    "Config",
    "load_config",
    "LLMConfig",
    "EditSettings",
    "SessionSettings",
    "get_llm_config",
    "get_edit_settings",
    "load_env_files",
    "DEFAULT_MODEL",
    "DEFAULT_CONFIDENCE_THRESHOLD",
]

# Configuration constants
DEFAULT_MODEL = "gemini-1.5-pro"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 8192
DEFAULT_TIMEOUT_SECONDS = 120
DEFAULT_CONFIDENCE_THRESHOLD = 70


def load_env_files(start_path: Optional[Path] = None) -> Optional[Path]:
    """Load environment variables from the first .env file found.

    Looks in the start directory (or cwd) and then in ~/.editwise.env.
    Returns the file that was loaded, if any.
    """
    base = start_path or Path.cwd()
    env_paths = [
        base / ".env",
        Path.home() / ".editwise.env",
    ]

    for env_path in env_paths:
        if env_path.is_file():
            load_dotenv(env_path)
            logger.debug(f"Loaded environment from {env_path}")
            return env_path
    return None


class Config:
    """Holds the editwise configuration loaded from pyproject.toml.

    Attributes:
    project_root: Directory containing the pyproject.toml the settings came
    from, or None if no file was found.
    settings: Read-only view of the [tool.editwise] table. Empty if the file
    or section is missing or invalid.

    editwise/src/editwise/config.py
    """

    def __init__(self, project_root: Path | None, config_dict: dict[str, Any]):
        self._project_root = project_root
        self._config_dict = config_dict.copy()

    @property
    def project_root(self) -> Path | None:
        return self._project_root

    @property
    def settings(self) -> Mapping[str, Union[str, bool, int, float, list, dict]]:
        return self._config_dict

    def get(self, key: str, default: Any = None) -> Any:
        """Gets a value from the loaded settings, returning default if not found."""
        return self._config_dict.get(key, default)

    def __getitem__(self, key: str) -> Any:
        if key not in self._config_dict:
            raise KeyError(
                f"Required configuration key '{key}' not found in "
                f"[tool.editwise] section of pyproject.toml."
            )
        return self._config_dict[key]

    def __contains__(self, key: str) -> bool:
        return key in self._config_dict

    def is_present(self) -> bool:
        """Checks if a project root was found and some settings were loaded."""
        return self._project_root is not None and bool(self._config_dict)


def load_config(start_path: Path) -> Config:
    """Loads editwise configuration from the nearest pyproject.toml.

    Args:
    start_path: The file or directory to start searching upwards from.

    Returns:
    A Config object. Parse and read errors are logged and produce an empty
    configuration rather than an exception.

    editwise/src/editwise/config.py
    """
    project_root = walk_up_for_config(start_path)
    if not project_root:
        logger.debug(f"No pyproject.toml found above '{start_path}'. Using defaults.")
        return Config(project_root=None, config_dict={})

    pyproject_path = project_root / "pyproject.toml"
    loaded_settings: dict[str, Any] = {}

    try:
        with open(pyproject_path, "rb") as f:
            full_toml_config = tomllib.load(f)
        logger.debug(f"Parsed {pyproject_path}")

        tool_section = full_toml_config.get("tool")
        if not isinstance(tool_section, dict):
            logger.debug("pyproject.toml [tool] section is missing or invalid")
            editwise_config = {}
        else:
            editwise_config = tool_section.get("editwise", {})

        if isinstance(editwise_config, dict):
            loaded_settings = editwise_config
            if loaded_settings:
                logger.debug(f"Loaded [tool.editwise] settings from {pyproject_path}")
        else:
            logger.warning(
                f"[tool.editwise] section in {pyproject_path} is not a valid table. "
                "Ignoring this section."
            )

    except tomllib.TOMLDecodeError as e:
        logger.error(f"Error parsing {pyproject_path}: {e}. Using empty configuration.")
    except OSError as e:
        logger.error(f"Error reading {pyproject_path}: {e}. Using empty configuration.")

    return Config(project_root=project_root, config_dict=loaded_settings)


@dataclass
class LLMConfig:
    """Typed oracle configuration."""

    api_url: Optional[str] = None
    model: str = DEFAULT_MODEL
    api_key: Optional[str] = None
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.api_url and self.model)


@dataclass
class EditSettings:
    """Behavioural settings for the edit and analyze flows."""

    confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD
    backup: bool = True
    exclude_dirs: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not 0 <= self.confidence_threshold <= 100:
            raise ConfigurationError(
                f"confidence_threshold must be between 0 and 100, got {self.confidence_threshold}"
            )


@dataclass(frozen=True)
class SessionSettings:
    """Per-invocation settings threaded through the edit and analysis flows."""

    model: str = DEFAULT_MODEL
    working_directory: Path = field(default_factory=Path.cwd)
    session_id: str = "edit-session"


def _get_env_float(key: str) -> Optional[float]:
    """Get float value from environment variable."""
    value = os.getenv(key)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            logger.warning(f"Ignoring non-numeric {key}={value!r}")
    return None


def _get_env_int(key: str) -> Optional[int]:
    """Get integer value from environment variable."""
    value = os.getenv(key)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            logger.warning(f"Ignoring non-integer {key}={value!r}")
    return None


def _first_not_none(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def get_llm_config(config: Optional[Config] = None) -> LLMConfig:
    """Get typed LLM configuration for editwise.

    Environment variables win over [tool.editwise.llm] values.

    Args:
        config: Optional Config object. If None, loads from current directory.

    Returns:
        LLMConfig with defaults applied; api_url may still be None.

    """
    if config is None:
        config = load_config(Path.cwd())

    llm_dict = config.get("llm", {})
    if not isinstance(llm_dict, dict):
        logger.warning("[tool.editwise.llm] is not a table. Ignoring it.")
        llm_dict = {}

    return LLMConfig(
        api_url=os.getenv("EDITWISE_LLM_API_URL") or llm_dict.get("api_url"),
        model=os.getenv("EDITWISE_LLM_MODEL") or llm_dict.get("model", DEFAULT_MODEL),
        api_key=os.getenv("EDITWISE_LLM_API_KEY") or llm_dict.get("api_key"),
        temperature=_first_not_none(
            _get_env_float("EDITWISE_LLM_TEMPERATURE"),
            llm_dict.get("temperature"),
            DEFAULT_TEMPERATURE,
        ),
        max_tokens=_first_not_none(
            _get_env_int("EDITWISE_LLM_MAX_TOKENS"),
            llm_dict.get("max_tokens"),
            DEFAULT_MAX_TOKENS,
        ),
        timeout_seconds=_first_not_none(
            _get_env_float("EDITWISE_LLM_TIMEOUT"),
            llm_dict.get("timeout_seconds"),
            DEFAULT_TIMEOUT_SECONDS,
        ),
    )


def get_edit_settings(config: Config) -> EditSettings:
    """Build EditSettings from the top level of [tool.editwise].

    Raises:
        ConfigurationError: If a value has the wrong type or range.
    """
    threshold = config.get("confidence_threshold", DEFAULT_CONFIDENCE_THRESHOLD)
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise ConfigurationError(
            f"confidence_threshold must be an integer, got {type(threshold).__name__}"
        )

    backup = config.get("backup", True)
    if not isinstance(backup, bool):
        raise ConfigurationError(f"backup must be true or false, got {backup!r}")

    exclude_dirs = config.get("exclude_dirs", [])
    if not isinstance(exclude_dirs, list) or not all(isinstance(d, str) for d in exclude_dirs):
        raise ConfigurationError("exclude_dirs must be a list of directory names")

    return EditSettings(
        confidence_threshold=threshold,
        backup=backup,
        exclude_dirs=list(exclude_dirs),
    )
