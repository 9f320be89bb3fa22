# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from .aggregate import DockerComposeTopology, ServiceTopology, build
from .models import (
    Mount,
    MountDeclaration,
    MountMode,
    PortBinding,
    PortDeclaration,
    Service,
    ServiceDeclaration,
)
from .network import Network

__all__ = [
    "DockerComposeTopology",
    "Mount",
    "MountDeclaration",
    "MountMode",
    "Network",
    "PortBinding",
    "PortDeclaration",
    "Service",
    "ServiceDeclaration",
    "ServiceTopology",
    "build",
]
