# src/rigger/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import uuid


@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events of one command invocation
    env: str          # environment name
    command: str      # provision/configure/...

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(env: str, command: str, run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "run_id": run_id or str(uuid.uuid4()),
        "env": env,
        "command": command,
    }


# ----- Command lifecycle -----

@dataclass(frozen=True)
class CommandStarted(BaseEvent):
    phase: str
    steps: List[str]

@dataclass(frozen=True)
class CommandSucceeded(BaseEvent):
    phase: str
    duration_ms: int
    message: str = ""

@dataclass(frozen=True)
class CommandFailed(BaseEvent):
    kind: str
    error: str
    failed_step: Optional[str]
    state_preserved: bool
    duration_ms: int


# ----- Steps -----

@dataclass(frozen=True)
class StepStarted(BaseEvent):
    step: str

@dataclass(frozen=True)
class StepSucceeded(BaseEvent):
    step: str
    duration_ms: int

@dataclass(frozen=True)
class StepFailed(BaseEvent):
    step: str
    kind: str
    error: str


# ----- State -----

@dataclass(frozen=True)
class PhaseCommitted(BaseEvent):
    previous: str
    phase: str
