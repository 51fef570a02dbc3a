"""Configuration management for thumbsniff."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import CLIOptions, LoggingSettings, ProcessingOptions, ThumbsniffConfig
from .resolver import env_overrides_from, flatten_for_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.thumbsniff/config.yaml")
_CONFIG_HEADER = textwrap.dedent(
    """\
    # thumbsniff configuration file
    # Created with defaults; edit by hand or with `thumbsniff config set`.
    """
)


class ConfigManager:
    """Read and write the YAML configuration file and resolve overrides."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the path of the YAML configuration file."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
    ) -> ThumbsniffConfig:
        """Return the effective configuration.

        Precedence, lowest first: defaults, config file, environment, CLI.

        Args:
            cli_overrides: Dotted-key overrides supplied on the command line.
            include_env: Whether ``THUMBSNIFF__*`` variables are applied.
            ensure_file: Create the config file with defaults when missing.

        Raises:
            ConfigError: If the file or any override is invalid.
        """
        if ensure_file:
            self.ensure_exists()

        return resolve_with_precedence(
            defaults=ThumbsniffConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_overrides_from(self._env) if include_env else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored on disk, or an empty dict."""
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def save(self, config: ThumbsniffConfig | Mapping[str, Any]) -> None:
        """Write ``config`` to disk, replacing the previous contents."""
        if isinstance(config, ThumbsniffConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(data, sort_keys=False)
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8"
        )

    def read_text(self) -> str:
        """Return the config file contents, or an empty string when absent."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def ensure_exists(self) -> Path:
        """Create the config file with defaults if it does not exist yet."""
        if not self._config_path.exists():
            self.save(ThumbsniffConfig())
        return self._config_path


__all__ = [
    "CLIOptions",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "LoggingSettings",
    "ProcessingOptions",
    "ThumbsniffConfig",
    "flatten_for_env",
    "resolve_with_precedence",
]
