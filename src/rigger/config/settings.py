# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DATA_DIR_NAME = "data"
BUILD_DIR_NAME = "build"
STATE_FILE_NAME = "environment.json"


def _default_working_dir() -> Path:
    return Path(os.environ.get("RIGGER_WORKING_DIR", Path.cwd()))


@dataclass(frozen=True)
class Settings:
    """
    Where rigger keeps things on the local disk.

      <working_dir>/data/<env>/environment.json   persisted state record
      <working_dir>/data/<env>/traces/            per-run event traces
      <working_dir>/build/<env>/                  rendered artifacts
      <working_dir>/logs/                         per-run log files
    """

    working_dir: Path = field(default_factory=_default_working_dir)
    lock_timeout: float = 10.0
    remote_deploy_dir: str = "/opt/torrust"
    ssh_wait_timeout: int = 120

    @property
    def data_root(self) -> Path:
        return self.working_dir / DATA_DIR_NAME

    @property
    def build_root(self) -> Path:
        return self.working_dir / BUILD_DIR_NAME

    def data_dir(self, name: str) -> Path:
        return self.data_root / name

    def build_dir(self, name: str) -> Path:
        return self.build_root / name

    def state_file(self, name: str) -> Path:
        return self.data_dir(name) / STATE_FILE_NAME

    def traces_dir(self, name: str) -> Path:
        return self.data_dir(name) / "traces"

    def tofu_dir(self, name: str, provider: str) -> Path:
        return self.build_dir(name) / "tofu" / provider

    def ansible_dir(self, name: str) -> Path:
        return self.build_dir(name) / "ansible"

    def compose_dir(self, name: str) -> Path:
        return self.build_dir(name) / "docker-compose"

    @property
    def log_dir(self) -> Path:
        return self.working_dir / "logs"
