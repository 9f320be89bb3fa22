# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/topology/aggregate.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..errors import TopologyError
from .models import Mount, MountMode, PortBinding, Service, ServiceDeclaration
from .network import network_name
from .rules import (
    RELABEL_REQUIRED,
    STORAGE_PREFIX,
    default_mounts,
    default_networks,
    default_ports,
)

log = logging.getLogger("rigger")


@dataclass(frozen=True)
class ServiceTopology:
    service: Service
    networks: Tuple[str, ...] = ()
    mounts: Tuple[Mount, ...] = ()
    ports: Tuple[PortBinding, ...] = ()

    @property
    def name(self) -> str:
        return self.service.value

    def has_ports(self) -> bool:
        return bool(self.ports)


@dataclass(frozen=True)
class DockerComposeTopology:
    """
    The render-ready topology: services in declaration order plus the global
    network list. Always construct through `build` or `create`; both check
    every invariant before an instance exists.
    """

    services: Tuple[ServiceTopology, ...]
    networks: Tuple[str, ...]

    @classmethod
    def create(
        cls,
        services: Sequence[ServiceTopology],
        networks: Sequence[str],
    ) -> "DockerComposeTopology":
        _check_unique_services(services)
        _check_networks(services, networks)
        for st in services:
            _check_mounts(st)
        _check_port_conflicts(services)
        return cls(services=tuple(services), networks=tuple(networks))

    def service(self, service: Service) -> Optional[ServiceTopology]:
        for st in self.services:
            if st.service is service:
                return st
        return None

    def has(self, service: Service) -> bool:
        return self.service(service) is not None

    def service_names(self) -> List[str]:
        return [st.name for st in self.services]


def build(
    declarations: Iterable[ServiceDeclaration],
    networks: Optional[Sequence[str]] = None,
) -> DockerComposeTopology:
    """
    Derive a DockerComposeTopology from user declarations.

    - Disabled declarations are dropped before the built-in rules run, so a
      disabled service neither appears nor pulls networks into others.
    - The global network list is the union of every network a service
      joins, in first-seen order.
    - When `networks` is given it is the declared network catalogue: a
      service joining a network outside it is an orphan reference.

    Raises TopologyError; a partial topology is never returned.
    """
    decls = list(declarations)
    _check_unique_services(decls)

    enabled: FrozenSet[Service] = frozenset(d.service for d in decls if d.enabled)
    services: List[ServiceTopology] = []

    for decl in decls:
        if not decl.enabled:
            log.debug("topology: skipping disabled service %s", decl.service)
            continue
        services.append(_service_topology(decl, enabled))

    if networks is not None:
        declared = {network_name(n) for n in networks}
        for st in services:
            for net in st.networks:
                if net not in declared:
                    raise TopologyError(
                        st.name,
                        "no-orphan-network",
                        f"network '{net}' is not declared",
                    )

    derived = _union_networks(services)
    topology = DockerComposeTopology.create(services, derived)
    log.debug(
        "topology: services=%s networks=%s",
        topology.service_names(),
        list(topology.networks),
    )
    return topology


# ------------------------------------------------------------------------------
# Derivation helpers
# ------------------------------------------------------------------------------

def _service_topology(decl: ServiceDeclaration, enabled: FrozenSet[Service]) -> ServiceTopology:
    if decl.networks is None:
        nets = default_networks(decl.service, enabled)
    else:
        nets = [network_name(n) for n in decl.networks]

    if decl.mounts is None:
        mounts = default_mounts(decl.service)
    else:
        mounts = [m.to_mount() for m in decl.mounts]

    if decl.ports is None:
        ports = default_ports(decl.service, enabled)
    else:
        ports = [p.to_binding() for p in decl.ports]

    # a service listing the same network twice joins it once
    nets = list(dict.fromkeys(nets))

    return ServiceTopology(
        service=decl.service,
        networks=tuple(nets),
        mounts=tuple(mounts),
        ports=tuple(ports),
    )


def _union_networks(services: Sequence[ServiceTopology]) -> List[str]:
    seen: Dict[str, None] = {}
    for st in services:
        for net in st.networks:
            seen.setdefault(net, None)
    return list(seen)


# ------------------------------------------------------------------------------
# Invariants
# ------------------------------------------------------------------------------

def _check_unique_services(items) -> None:
    seen = set()
    for item in items:
        if item.service in seen:
            raise TopologyError(
                item.service.value,
                "no-duplicate-service",
                "declared more than once",
            )
        seen.add(item.service)


def _check_networks(services: Sequence[ServiceTopology], networks: Sequence[str]) -> None:
    counts: Dict[str, int] = {}
    for net in networks:
        counts[net] = counts.get(net, 0) + 1

    for net, n in counts.items():
        if n > 1:
            raise TopologyError(None, "unique-network", f"network '{net}' listed {n} times")

    for st in services:
        for net in st.networks:
            if net not in counts:
                raise TopologyError(
                    st.name,
                    "no-orphan-network",
                    f"network '{net}' is missing from the global network list",
                )


def _check_mounts(st: ServiceTopology) -> None:
    targets = set()
    for m in st.mounts:
        if not m.container_path.startswith("/"):
            raise TopologyError(
                st.name,
                "mount-path",
                f"container path '{m.container_path}' must be absolute",
            )
        if m.container_path in targets:
            raise TopologyError(
                st.name,
                "mount-path",
                f"container path '{m.container_path}' is mounted twice",
            )
        targets.add(m.container_path)

        if m.mode is MountMode.RO_RELABEL and not m.host_path.startswith(STORAGE_PREFIX):
            raise TopologyError(
                st.name,
                "mount-mode",
                f"relabelled mount '{m.host_path}' must live under {STORAGE_PREFIX}",
            )

        if (
            st.service in RELABEL_REQUIRED
            and m.container_path.startswith("/etc/")
            and m.mode is not MountMode.RO_RELABEL
        ):
            raise TopologyError(
                st.name,
                "mount-mode",
                f"config mount '{m.container_path}' must be {MountMode.RO_RELABEL.value}",
            )


def _check_port_conflicts(services: Sequence[ServiceTopology]) -> None:
    bound: Dict[Tuple[int, str], str] = {}
    for st in services:
        for p in st.ports:
            key = (p.host_port, p.protocol)
            if key in bound:
                raise TopologyError(
                    st.name,
                    "no-port-conflict",
                    f"host port {p.host_port}/{p.protocol} already bound by '{bound[key]}'",
                )
            bound[key] = st.name
