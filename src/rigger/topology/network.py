# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/topology/network.py
from __future__ import annotations

from enum import Enum


class Network(str, Enum):
    """Well-known docker networks used by the built-in service rules."""

    DATABASE = "database_network"
    METRICS = "metrics_network"
    VISUALIZATION = "visualization_network"
    PROXY = "proxy_network"

    def __str__(self) -> str:
        return self.value


DEFAULT_DRIVER = "bridge"


def network_name(network: str) -> str:
    return network.value if isinstance(network, Network) else str(network)
