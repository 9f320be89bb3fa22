# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/environment/state.py
from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet


class Phase(str, Enum):
    CREATED = "created"
    PROVISIONED = "provisioned"
    CONFIGURED = "configured"
    RELEASED = "released"
    RUNNING = "running"
    DESTROYED = "destroyed"

    def __str__(self) -> str:
        return self.value


# Phases in which an instance exists and its runtime outputs are known.
PROVISIONED_PHASES: FrozenSet[Phase] = frozenset(
    {Phase.PROVISIONED, Phase.CONFIGURED, Phase.RELEASED, Phase.RUNNING}
)

# operation -> phases it may start from
SOURCE_PHASES: Dict[str, FrozenSet[Phase]] = {
    "provision": frozenset({Phase.CREATED}),
    "register": frozenset({Phase.CREATED}),
    "render": frozenset({Phase.CREATED}),
    "configure": frozenset({Phase.PROVISIONED}),
    "release": frozenset({Phase.CONFIGURED, Phase.RELEASED, Phase.RUNNING}),
    "run": frozenset({Phase.RELEASED, Phase.RUNNING}),
    "destroy": frozenset(set(Phase) - {Phase.DESTROYED}),
    "purge": frozenset({Phase.DESTROYED}),
}

# operation -> phase committed on success
TARGET_PHASE: Dict[str, Phase] = {
    "provision": Phase.PROVISIONED,
    "register": Phase.PROVISIONED,
    "configure": Phase.CONFIGURED,
    "release": Phase.RELEASED,
    "run": Phase.RUNNING,
    "destroy": Phase.DESTROYED,
}


def can(operation: str, phase: Phase) -> bool:
    return phase in SOURCE_PHASES[operation]
