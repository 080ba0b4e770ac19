"""Configuration management for boorusort."""

from __future__ import annotations

import logging
import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from .exceptions import ConfigError, UnsupportedConfigFileError
from .models import BooruSortConfig
from .resolver import FLAT_KEY_ALIASES, resolve_with_precedence

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.boorusort/config.yaml")
CONFIG_SUFFIXES = (".yaml", ".yml")
ENV_PREFIX = "BOORUSORT__"
_CONFIG_HEADER = textwrap.dedent(
    """\
    # boorusort configuration file
    # Generated automatically; edit freely or pass extra files on the command line.
    # Flat upper-case keys (LOGIN, API_KEY, CONVERT, ...) are accepted as aliases.
    """
)


class ConfigManager:
    """Load and persist configuration data, applying precedence rules."""

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
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        extra_files: Iterable[Path] = (),
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> BooruSortConfig:
        """Load configuration data from disk, applying precedence rules.

        Args:
            extra_files: Additional YAML files layered over the default file in order.
            cli_overrides: Dotted-key overrides from command-line flags.
            include_env: Whether ``BOORUSORT__`` variables are consulted.
            ensure_file: Create the default file when it is missing.
            env_overrides: Environment mapping used instead of ``os.environ``.

        Returns:
            BooruSortConfig: Effective configuration.

        Raises:
            ConfigError: If any source is unreadable or invalid.
        """
        if ensure_file:
            self.ensure_exists()

        layers = [self._read_file(self._config_path)]
        for extra in extra_files:
            layers.append(self.read_user_file(extra))

        env_data: Mapping[str, str] | None
        if include_env:
            env_data = env_overrides if env_overrides is not None else self._env
        else:
            env_data = None

        return resolve_with_precedence(
            defaults=BooruSortConfig(),
            file_overrides=layers,
            env_overrides=self._extract_env(env_data) if env_data else None,
            cli_overrides=cli_overrides,
        )

    def read_user_file(self, path: Path) -> dict[str, Any]:
        """Return overrides stored in a user-supplied config file.

        Raises:
            UnsupportedConfigFileError: If the file is not a YAML file.
            ConfigError: If the file cannot be parsed.
        """
        if path.suffix.lower() not in CONFIG_SUFFIXES:
            raise UnsupportedConfigFileError(str(path))
        LOGGER.info("Loading user config: %s", path.resolve())
        return self._read_file(path)

    def save(self, config: BooruSortConfig | Mapping[str, Any]) -> None:
        """Persist configuration data to disk."""
        if isinstance(config, BooruSortConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._write_file(data)

    def ensure_exists(self) -> Path:
        """Create a configuration file with defaults if one does not exist."""
        path = self._config_path
        if path.exists():
            return path

        self._write_file(BooruSortConfig().model_dump(mode="python"))
        return path

    # Internal helpers -------------------------------------------------

    def _read_file(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}

        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file {path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError(f"Configuration file {path} must contain a mapping at the top level.")

        return raw

    def _write_file(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        serialized = yaml.safe_dump(dict(data), sort_keys=False, allow_unicode=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        timestamp = f"# Last updated: {stamp}\n"
        self._config_path.write_text(_CONFIG_HEADER + timestamp + serialized, encoding="utf-8")

    def _extract_env(self, env: Mapping[str, str]) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for key, raw_value in env.items():
            if not key.startswith(ENV_PREFIX):
                continue
            path = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
            if not path:
                continue
            parsed_value: Any
            try:
                parsed_value = yaml.safe_load(raw_value)
            except yaml.YAMLError:
                parsed_value = raw_value

            self._assign_nested(overrides, path, parsed_value)

        return overrides

    def _assign_nested(self, target: dict[str, Any], path: list[str], value: Any) -> None:
        current = target
        for segment in path[:-1]:
            existing = current.get(segment)
            if not isinstance(existing, dict):
                existing = {}
                current[segment] = existing
            current = existing
        current[path[-1]] = value


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "BooruSortConfig",
    "resolve_with_precedence",
    "ConfigError",
    "UnsupportedConfigFileError",
    "FLAT_KEY_ALIASES",
]
