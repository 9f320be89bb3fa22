# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/topology/rules.py
"""
Static per-service rules: which networks a service joins, which host
directories it mounts and which ports it publishes, given the set of
services that are enabled alongside it.
"""
from __future__ import annotations

from typing import FrozenSet, List

from .models import Mount, MountMode, PortBinding, Service
from .network import Network

# Services whose config mounts must carry a private SELinux label.
RELABEL_REQUIRED: FrozenSet[Service] = frozenset(
    {Service.PROMETHEUS, Service.GRAFANA, Service.CADDY, Service.BACKUP}
)

STORAGE_PREFIX = "./storage/"


def default_networks(service: Service, enabled: FrozenSet[Service]) -> List[str]:
    nets: List[Network] = []

    if service is Service.TRACKER:
        if Service.PROMETHEUS in enabled:
            nets.append(Network.METRICS)
        if Service.MYSQL in enabled:
            nets.append(Network.DATABASE)
        if Service.CADDY in enabled:
            nets.append(Network.PROXY)
    elif service is Service.MYSQL:
        nets.append(Network.DATABASE)
    elif service is Service.PROMETHEUS:
        nets.append(Network.METRICS)
        if Service.GRAFANA in enabled:
            nets.append(Network.VISUALIZATION)
    elif service is Service.GRAFANA:
        nets.append(Network.VISUALIZATION)
        if Service.CADDY in enabled:
            nets.append(Network.PROXY)
    elif service is Service.CADDY:
        nets.append(Network.PROXY)
    elif service is Service.BACKUP:
        if Service.MYSQL in enabled:
            nets.append(Network.DATABASE)

    return [n.value for n in nets]


def default_mounts(service: Service) -> List[Mount]:
    rw, ro, relabel = MountMode.RW, MountMode.RO, MountMode.RO_RELABEL
    table = {
        Service.TRACKER: [
            Mount("./storage/tracker/lib", "/var/lib/torrust/tracker", rw),
            Mount("./storage/tracker/log", "/var/log/torrust/tracker", rw),
            Mount("./storage/tracker/etc", "/etc/torrust/tracker", rw),
        ],
        Service.MYSQL: [
            Mount("./storage/mysql/data", "/var/lib/mysql", rw),
        ],
        Service.PROMETHEUS: [
            Mount("./storage/prometheus/etc", "/etc/prometheus", relabel),
        ],
        Service.GRAFANA: [
            Mount("./storage/grafana/data", "/var/lib/grafana", rw),
            Mount("./storage/grafana/provisioning", "/etc/grafana/provisioning", relabel),
        ],
        Service.CADDY: [
            Mount("./storage/caddy/etc/Caddyfile", "/etc/caddy/Caddyfile", relabel),
            Mount("./storage/caddy/data", "/data", rw),
            Mount("./storage/caddy/config", "/config", rw),
        ],
        Service.BACKUP: [
            Mount("./storage/backup/etc", "/etc/backup", relabel),
            Mount("./storage/backup/data", "/backups", rw),
            Mount("./storage/tracker/lib", "/data/storage/tracker/lib", ro),
        ],
    }
    return list(table[service])


def default_ports(service: Service, enabled: FrozenSet[Service]) -> List[PortBinding]:
    if service is Service.TRACKER:
        return [
            PortBinding(6969, 6969, "udp"),
            PortBinding(7070, 7070),
            PortBinding(1212, 1212),
        ]
    if service is Service.CADDY:
        return [
            PortBinding(80, 80),
            PortBinding(443, 443),
            PortBinding(443, 443, "udp"),
        ]
    if service is Service.GRAFANA and Service.CADDY not in enabled:
        return [PortBinding(3000, 3000)]
    if service is Service.PROMETHEUS:
        return [PortBinding(9090, 9090, host_ip="127.0.0.1")]
    return []
