"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from .exceptions import ConfigError
from .models import BooruSortConfig

# Flat upper-case keys accepted as aliases for nested settings.
FLAT_KEY_ALIASES: dict[str, str] = {
    "LOGIN": "api.login",
    "API_KEY": "api.api_key",
    "CONVERT": "processing.convert",
    "REVERSE_SEARCH": "processing.reverse_search",
    "BY_RATING": "classification.by_rating",
    "BY_INTERACTION": "classification.by_interaction",
    "REQUIRE_ALL_TAGS": "classification.require_all_tags",
    "REQUIRE_ONE_TAG": "classification.require_one_tag",
}


def resolve_with_precedence(
    *,
    defaults: BooruSortConfig,
    file_overrides: Iterable[Mapping[str, Any]] | Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> BooruSortConfig:
    """Merge configuration sources: defaults, files, environment, then CLI.

    Args:
        defaults: Baseline configuration.
        file_overrides: One mapping, or several applied in order, read from
            configuration files.
        env_overrides: Overrides parsed from ``BOORUSORT__`` variables.
        cli_overrides: Overrides supplied by command-line flags.

    Returns:
        BooruSortConfig: Validated configuration.

    Raises:
        ConfigError: If an override is malformed or fails validation.
    """
    merged = deepcopy(defaults.model_dump(mode="python"))

    if file_overrides is None:
        file_layers: list[Mapping[str, Any]] = []
    elif isinstance(file_overrides, MappingABC):
        file_layers = [file_overrides]
    else:
        file_layers = list(file_overrides)

    sources: list[tuple[str, Mapping[str, Any] | None]] = [("file", layer) for layer in file_layers]
    sources.append(("environment", env_overrides))
    sources.append(("cli", cli_overrides))

    for name, source in sources:
        if source is None:
            continue
        overrides = _normalize_mapping(source, source_name=name)
        merged = _deep_merge(merged, overrides)

    try:
        return BooruSortConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def _normalize_mapping(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for key, value in dict(source).items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        dotted = FLAT_KEY_ALIASES.get(key, key)
        path = dotted.split(".") if "." in dotted else [dotted]
        _assign(result, path, value, source_name=source_name)
    return result


def _assign(target: dict[str, Any], path: list[str], value: Any, *, source_name: str) -> None:
    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            joined = ".".join(path)
            raise ConfigError(
                f"{source_name.capitalize()} override for {joined} conflicts with existing value."
            )
        node = existing
    leaf = path[-1]
    if isinstance(value, MappingABC):
        nested = _normalize_mapping(value, source_name=source_name)
        existing_leaf = node.get(leaf, {})
        if not isinstance(existing_leaf, MappingABC):
            existing_leaf = {}
        node[leaf] = _deep_merge(existing_leaf, nested)
    else:
        node[leaf] = value


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for key, value in base.items():
        merged[key] = deepcopy(value)
    for key, value in overrides.items():
        if isinstance(value, MappingABC) and isinstance(merged.get(key), MappingABC):
            merged[key] = _deep_merge(dict(merged[key]), value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["resolve_with_precedence", "FLAT_KEY_ALIASES"]
