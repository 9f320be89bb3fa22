# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/adapters/interface.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Protocol, Sequence


@dataclass(frozen=True)
class InstanceInfo:
    address: str
    name: str = ""
    provider_ids: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Inventory:
    """Connection details for the configuration engine."""

    host: str
    address: str
    username: str
    port: int
    private_key_path: Path


class ProvisioningAdapter(Protocol):
    def provision(self, working_dir: Path) -> InstanceInfo: ...

    def destroy(self, working_dir: Path) -> None: ...


class ConfigurationAdapter(Protocol):
    def configure(self, project_dir: Path, inventory: Inventory, playbooks: Sequence[str]) -> None: ...


class RemoteHost(Protocol):
    def wait_until_reachable(self, timeout: int) -> None: ...

    def upload_dir(self, local_dir: Path, remote_dir: str) -> List[str]: ...

    def run(self, command: str, *, sudo: bool = False) -> str: ...

    def close(self) -> None: ...


class HealthChecker(Protocol):
    def check(self, url: str) -> None: ...
