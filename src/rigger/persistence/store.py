# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/persistence/store.py
from __future__ import annotations

import json
import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..config.models import UserInputs
from ..config.settings import Settings
from ..environment.aggregate import Environment, RuntimeOutputs
from ..environment.name import validate_name
from ..environment.state import Phase
from ..errors import EnvironmentNotFound, PersistenceFailure
from ..utils.serialize import to_jsonable
from .lock import file_lock

log = logging.getLogger("rigger")

FORMAT_VERSION = 1


def to_record(env: Environment) -> Dict[str, Any]:
    return {
        "format_version": FORMAT_VERSION,
        "name": env.name,
        "phase": env.phase.value,
        "created_at": env.created_at.isoformat(),
        "user_inputs": to_jsonable(env.user_inputs),
        "runtime_outputs": to_jsonable(env.runtime_outputs) if env.runtime_outputs else None,
    }


def from_record(data: Dict[str, Any]) -> Environment:
    version = data.get("format_version")
    if version != FORMAT_VERSION:
        raise PersistenceFailure(
            f"unsupported state format_version {version!r} (expected {FORMAT_VERSION})"
        )
    try:
        outputs = data.get("runtime_outputs")
        return Environment(
            name=data["name"],
            phase=Phase(data["phase"]),
            user_inputs=UserInputs.model_validate(data["user_inputs"]),
            runtime_outputs=RuntimeOutputs.model_validate(outputs) if outputs else None,
            created_at=datetime.fromisoformat(data["created_at"]),
        )
    except (KeyError, ValueError, ValidationError) as exc:
        raise PersistenceFailure(f"corrupt environment record: {exc}") from exc


@dataclass
class ListedEnvironment:
    name: str
    environment: Optional[Environment] = None
    error: Optional[str] = None


class EnvironmentStore:
    """
    One JSON document per environment under `data/<name>/environment.json`.

    Writes go to a temporary file in the same directory, are fsynced and
    then renamed over the record, so a crash leaves either the old or the
    new document, never a mix.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def path(self, name: str) -> Path:
        return self.settings.state_file(name)

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    def load(self, name: str) -> Environment:
        validate_name(name)
        path = self.path(name)
        if not path.is_file():
            raise EnvironmentNotFound(name)

        with file_lock(path, self.settings.lock_timeout):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise PersistenceFailure(f"cannot read {path}: {exc}") from exc

        env = from_record(data)
        if env.name != name:
            raise PersistenceFailure(
                f"{path} holds environment '{env.name}', expected '{name}'"
            )
        log.debug("loaded environment %s (phase=%s)", name, env.phase)
        return env

    def save(self, env: Environment) -> None:
        path = self.path(env.name)
        content = json.dumps(to_record(env), indent=2, sort_keys=True)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with file_lock(path, self.settings.lock_timeout):
                self._write_atomic(path, content)
        except OSError as exc:
            raise PersistenceFailure(f"cannot write {path}: {exc}") from exc

        log.debug("saved environment %s (phase=%s)", env.name, env.phase)

    def delete(self, name: str) -> None:
        """Remove the record and everything else under data/<name>."""
        data_dir = self.settings.data_dir(name)
        if not data_dir.exists():
            return
        try:
            shutil.rmtree(data_dir)
        except OSError as exc:
            raise PersistenceFailure(f"cannot remove {data_dir}: {exc}") from exc
        log.info("removed data directory %s", data_dir)

    def names(self) -> List[str]:
        root = self.settings.data_root
        if not root.is_dir():
            return []
        return sorted(
            p.name for p in root.iterdir()
            if p.is_dir() and (p / self.path(p.name).name).is_file()
        )

    def list(self) -> List[ListedEnvironment]:
        out: List[ListedEnvironment] = []
        for name in self.names():
            try:
                out.append(ListedEnvironment(name=name, environment=self.load(name)))
            except (PersistenceFailure, ValueError) as exc:
                log.warning("skipping unreadable environment %s: %s", name, exc)
                out.append(ListedEnvironment(name=name, error=str(exc)))
        return out

    @staticmethod
    def _write_atomic(path: Path, content: str) -> None:
        tmp = path.with_name(path.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
