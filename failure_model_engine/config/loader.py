"""Layered configuration loading: CLI > ENV > file > defaults."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import yaml

from failure_model_engine.exceptions import ConfigurationError
from failure_model_engine.utils.logging import get_logger

log = get_logger(__name__, component="config")


def _load_yaml(path: Path) -> dict:
    """Read a YAML or JSON mapping from disk."""
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    suffix = path.suffix.lower()
    text = path.read_text()
    try:
        if suffix == ".json":
            content = json.loads(text)
        elif suffix in {".yml", ".yaml"}:
            content = yaml.safe_load(text)
        else:
            raise ConfigurationError("Config file must be JSON or YAML")
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Could not parse config file {path}: {exc}") from exc
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return content


def load_config_with_precedence(
    *,
    config_path: Optional[Path],
    env_prefix: str,
    cli_values: Mapping[str, Any],
    defaults: Mapping[str, Any],
    casters: Optional[Mapping[str, Callable[[Any], Any]]] = None,
) -> Dict[str, Any]:
    """Merge configuration sources; a value of None means "not supplied".

    Only keys present in ``defaults`` are considered, so stray file or
    environment entries are ignored.
    """

    casters = casters or {}
    file_values = _load_yaml(config_path) if config_path is not None else {}
    unknown = set(file_values) - set(defaults)
    if unknown:
        log.warning("Ignoring unknown config keys", extra={"keys": sorted(unknown)})

    merged: Dict[str, Any] = {}
    for key, default in defaults.items():
        env_value = os.environ.get(f"{env_prefix}{key.upper()}")
        for source, value in (("cli", cli_values.get(key)), ("env", env_value), ("file", file_values.get(key))):
            if value is not None:
                break
        else:
            source, value = "default", default

        caster = casters.get(key)
        if caster is not None and value is not None and source != "default":
            try:
                value = caster(value)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Invalid value for {key} from {source}: {value!r}") from exc
        merged[key] = value
    return merged


__all__ = ["load_config_with_precedence"]
