# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/errors.py
from __future__ import annotations

from typing import Optional


class RiggerError(RuntimeError):
    """
    Base class for every classified failure a command can surface.

    `kind` is the stable classification printed by the CLI.
    `state_preserved` tells the user whether the persisted environment
    record was left exactly as it was before the command started.
    """

    kind = "RiggerError"
    state_preserved = True


class EnvironmentNotFound(RiggerError):
    kind = "EnvironmentNotFound"

    def __init__(self, name: str):
        super().__init__(
            f"environment '{name}' has no persisted record; create it first"
        )
        self.name = name


class EnvironmentAlreadyExists(RiggerError):
    kind = "EnvironmentAlreadyExists"

    def __init__(self, name: str):
        super().__init__(
            f"environment '{name}' already exists; purge it before creating it again"
        )
        self.name = name


class InvalidPhaseTransition(RiggerError):
    kind = "InvalidPhaseTransition"

    def __init__(self, name: str, phase: str, operation: str):
        super().__init__(
            f"cannot {operation} environment '{name}' while it is {phase}; "
            f"run 'rigger show {name}' to inspect it"
        )
        self.name = name
        self.phase = phase
        self.operation = operation


class PreconditionNotMet(RiggerError):
    kind = "PreconditionNotMet"


class NotDestroyed(RiggerError):
    kind = "NotDestroyed"

    def __init__(self, name: str, phase: str):
        super().__init__(
            f"environment '{name}' is {phase}; destroy it before purging "
            "(or pass --force)"
        )
        self.name = name
        self.phase = phase


class TopologyError(RiggerError):
    """Raised when the derived service topology violates an invariant."""

    kind = "TopologyError"

    def __init__(self, service: Optional[str], rule: str, message: str):
        where = f"service '{service}'" if service else "topology"
        super().__init__(f"{where} violates {rule}: {message}")
        self.service = service
        self.rule = rule


class AdapterFailure(RiggerError):
    """An external tool exited non-zero or produced output we cannot parse."""

    kind = "AdapterFailure"

    def __init__(
        self,
        tool: str,
        message: str,
        *,
        argv: Optional[list[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        detail = f"{tool} failed: {message}"
        if returncode is not None:
            detail += f" (rc={returncode})"
        if stderr.strip():
            detail += f"\n{stderr.rstrip()}"
        super().__init__(detail)
        self.tool = tool
        self.argv = argv or []
        self.returncode = returncode
        self.stderr = stderr


class PersistenceFailure(RiggerError):
    """The state store could not read or write a record."""

    kind = "PersistenceFailure"


class ConfigError(RiggerError):
    """User supplied configuration could not be loaded or validated."""

    kind = "ConfigError"
