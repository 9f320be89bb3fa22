# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/topology/models.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Service(str, Enum):
    TRACKER = "tracker"
    MYSQL = "mysql"
    PROMETHEUS = "prometheus"
    GRAFANA = "grafana"
    CADDY = "caddy"
    BACKUP = "backup"

    def __str__(self) -> str:
        return self.value


class MountMode(str, Enum):
    RW = "rw"
    RO = "ro"
    RO_RELABEL = "ro_relabel"   # read-only plus private SELinux label (:Z)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Mount:
    host_path: str
    container_path: str
    mode: MountMode = MountMode.RW

    def compose_volume(self) -> str:
        """Short volume syntax, e.g. ./storage/prometheus/etc:/etc/prometheus:Z"""
        base = f"{self.host_path}:{self.container_path}"
        if self.mode is MountMode.RO:
            return f"{base}:ro"
        if self.mode is MountMode.RO_RELABEL:
            return f"{base}:Z"
        return base


@dataclass(frozen=True)
class PortBinding:
    host_port: int
    container_port: int
    protocol: str = "tcp"
    host_ip: Optional[str] = None

    def compose_binding(self) -> str:
        suffix = "/udp" if self.protocol == "udp" else ""
        if self.host_ip:
            return f"{self.host_ip}:{self.host_port}:{self.container_port}{suffix}"
        return f"{self.host_port}:{self.container_port}{suffix}"


# ----- User declarations (validated from YAML) -----

class MountDeclaration(BaseModel):
    model_config = ConfigDict(frozen=True)

    host_path: str
    container_path: str
    mode: MountMode = MountMode.RW

    def to_mount(self) -> Mount:
        return Mount(self.host_path, self.container_path, self.mode)


class PortDeclaration(BaseModel):
    model_config = ConfigDict(frozen=True)

    host_port: int = Field(ge=1, le=65535)
    container_port: Optional[int] = Field(default=None, ge=1, le=65535)
    protocol: Literal["tcp", "udp"] = "tcp"
    host_ip: Optional[str] = None

    def to_binding(self) -> PortBinding:
        return PortBinding(
            host_port=self.host_port,
            container_port=self.container_port or self.host_port,
            protocol=self.protocol,
            host_ip=self.host_ip,
        )


class ServiceDeclaration(BaseModel):
    """
    One service as the user declares it.

    `networks`, `mounts` and `ports` left as None fall back to the built-in
    rules for the service kind; an explicit list replaces them.
    """

    model_config = ConfigDict(frozen=True)

    service: Service
    enabled: bool = True
    networks: Optional[List[str]] = None
    mounts: Optional[List[MountDeclaration]] = None
    ports: Optional[List[PortDeclaration]] = None
