# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/commands/queries.py
"""Read-only views over the state store. Nothing here takes a write lock."""
from __future__ import annotations

from typing import Any, Dict, List

from ..persistence.store import EnvironmentStore
from ..topology.aggregate import build
from ..utils.serialize import to_jsonable


def list_environments(store: EnvironmentStore) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for item in store.list():
        if item.environment is None:
            rows.append({"name": item.name, "phase": "unreadable", "address": None, "error": item.error})
            continue
        env = item.environment
        rows.append({"name": env.name, "phase": env.phase.value, "address": env.address, "error": None})
    return rows


def show_environment(store: EnvironmentStore, name: str) -> Dict[str, Any]:
    env = store.load(name)
    inputs = env.user_inputs
    topology = build(inputs.services, inputs.networks)
    return {
        "name": env.name,
        "phase": env.phase.value,
        "created_at": env.created_at.isoformat(),
        "instance_name": env.instance_name,
        "provider": inputs.provider.kind,
        "runtime_outputs": to_jsonable(env.runtime_outputs) if env.runtime_outputs else None,
        "services": topology.service_names(),
        "networks": list(topology.networks),
        "ports": {
            st.name: [p.compose_binding() for p in st.ports]
            for st in topology.services if st.has_ports()
        },
    }
