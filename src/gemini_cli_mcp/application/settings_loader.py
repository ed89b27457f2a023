"""
Settings Loader
===============

Loads the server settings from an optional YAML file and the environment.

Resolution order (later wins):
1. Built-in defaults of ``GeminiCliSettings``
2. YAML file given explicitly, or via ``GEMINI_CLI_MCP_CONFIG``
3. Environment overrides (``GEMINI_CLI_MCP_EXECUTABLE``,
   ``GEMINI_CLI_MCP_TIMEOUT_SECONDS``, ``LOGLEVEL``)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml

from gemini_cli_mcp.core.domain.config_schema import (
    ConfigValidationError,
    GeminiCliSettings,
    validate_settings,
)

logger = structlog.get_logger(__name__)

CONFIG_PATH_ENV = "GEMINI_CLI_MCP_CONFIG"

# Environment variable -> settings field
ENV_OVERRIDES: dict[str, str] = {
    "GEMINI_CLI_MCP_EXECUTABLE": "executable",
    "GEMINI_CLI_MCP_TIMEOUT_SECONDS": "timeout_seconds",
    "LOGLEVEL": "log_level",
}


class SettingsLoader:
    """Resolve ``GeminiCliSettings`` from file and environment.

    Args:
        environ: Environment mapping (defaults to ``os.environ``).
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ
        self._logger = logger.bind(component="settings_loader")

    def load(self, config_path: str | Path | None = None) -> GeminiCliSettings:
        """Load settings.

        Args:
            config_path: YAML file; falls back to ``GEMINI_CLI_MCP_CONFIG``.

        Returns:
            Validated settings.

        Raises:
            ConfigValidationError: If the file is missing, unreadable or invalid.
        """
        path = config_path or self._environ.get(CONFIG_PATH_ENV)
        data: dict[str, Any] = {}
        file_path: Path | None = None
        if path:
            file_path = Path(path).expanduser()
            data = self._read_yaml(file_path)

        for env_name, field_name in ENV_OVERRIDES.items():
            value = self._environ.get(env_name)
            if value:
                data[field_name] = value

        settings = validate_settings(data, file_path=file_path)
        self._logger.debug(
            "settings_loaded",
            config_path=str(file_path) if file_path else None,
            executable=settings.executable,
            timeout_seconds=settings.timeout_seconds,
        )
        return settings

    def _read_yaml(self, file_path: Path) -> dict[str, Any]:
        if not file_path.is_file():
            raise ConfigValidationError("Config file not found", file_path=file_path)
        try:
            with open(file_path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigValidationError(str(e), file_path=file_path) from e
        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise ConfigValidationError(
                "Top-level YAML value must be a mapping", file_path=file_path
            )
        return dict(loaded)
