# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/config/loader.py

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .models import EnvironmentConfig

log = logging.getLogger("rigger")


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _find_secrets_file(config_path: Path) -> Path | None:
    """
    Locate secrets.yaml using this priority:

    1. RIGGER_SECRETS_FILE environment variable (explicit override)
    2. secrets.yaml in the same directory as the environment config
    """
    env = os.environ.get("RIGGER_SECRETS_FILE")
    if env:
        p = Path(env)
        if p.is_file():
            return p
        log.warning("RIGGER_SECRETS_FILE=%s does not exist, skipping", env)
        return None

    p = config_path.parent / "secrets.yaml"
    if p.is_file():
        return p

    return None


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    try:
        raw = path.read_text()
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc

    expanded = os.path.expandvars(raw)
    try:
        data = yaml.safe_load(expanded) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def load_config(path: str | Path) -> EnvironmentConfig:
    """
    Load and validate an environment config.

    Secrets (API tokens, for instance) can live in a separate
    ``secrets.yaml`` whose structure mirrors the config; it is deep-merged
    before validation. ``${ENV_VAR}`` placeholders are expanded in both files.
    Relative key paths under ``ssh`` are resolved against the config file's
    directory.
    """
    path = Path(path)
    data = _load_yaml(path)

    secrets_path = _find_secrets_file(path)
    if secrets_path:
        log.debug("Merging secrets from %s", secrets_path)
        _deep_merge(data, _load_yaml(secrets_path))
    else:
        log.debug("No secrets.yaml found, proceeding without secrets merge")

    ssh = data.get("ssh")
    if isinstance(ssh, dict):
        for key in ("private_key_path", "public_key_path"):
            if ssh.get(key):
                p = Path(os.path.expanduser(str(ssh[key])))
                ssh[key] = str(p if p.is_absolute() else (path.parent / p).resolve())

    try:
        return EnvironmentConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid environment config {path}:\n{exc}") from exc
