# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/environment/aggregate.py
from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config.models import UserInputs
from ..errors import InvalidPhaseTransition, PreconditionNotMet
from .name import validate_name
from .state import PROVISIONED_PHASES, Phase, TARGET_PHASE, can


class RuntimeOutputs(BaseModel):
    """Values discovered while provisioning or registering the instance."""

    model_config = ConfigDict(frozen=True)

    address: str
    instance_name: Optional[str] = None
    provider_ids: Dict[str, str] = Field(default_factory=dict)
    # "registered" instances existed before rigger and are never destroyed by it
    provision_method: Literal["provisioned", "registered"] = "provisioned"

    @field_validator("address")
    @classmethod
    def _is_ip(cls, v: str) -> str:
        ipaddress.ip_address(v)
        return v


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Environment:
    """
    One named deployment target.

    Transition methods never mutate; they return the environment as it will
    look once the corresponding external action has succeeded. Commands only
    persist that value after the action succeeded.
    """

    name: str
    user_inputs: UserInputs
    phase: Phase = Phase.CREATED
    runtime_outputs: Optional[RuntimeOutputs] = None
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        validate_name(self.name)
        has_outputs = self.runtime_outputs is not None
        if has_outputs != (self.phase in PROVISIONED_PHASES):
            raise ValueError(
                f"environment '{self.name}' in phase {self.phase} "
                f"{'must not' if has_outputs else 'must'} have runtime outputs"
            )

    # ----- derived -----

    @property
    def instance_name(self) -> str:
        return self.user_inputs.instance_name or f"rigger-{self.name}"

    @property
    def address(self) -> Optional[str]:
        return self.runtime_outputs.address if self.runtime_outputs else None

    @property
    def is_managed(self) -> bool:
        """True unless the instance was registered rather than provisioned."""
        if self.runtime_outputs is None:
            return True
        return self.runtime_outputs.provision_method == "provisioned"

    @property
    def is_destroyed(self) -> bool:
        return self.phase is Phase.DESTROYED

    def ensure_can(self, operation: str) -> None:
        if not can(operation, self.phase):
            raise InvalidPhaseTransition(self.name, self.phase.value, operation)

    # ----- transitions -----

    def provision(self, outputs: RuntimeOutputs) -> "Environment":
        self.ensure_can("provision")
        if self.runtime_outputs is not None:
            raise PreconditionNotMet(
                f"environment '{self.name}' already has runtime outputs"
            )
        return replace(self, phase=TARGET_PHASE["provision"], runtime_outputs=outputs)

    def register(self, outputs: RuntimeOutputs) -> "Environment":
        self.ensure_can("register")
        if outputs.provision_method != "registered":
            outputs = outputs.model_copy(update={"provision_method": "registered"})
        return replace(self, phase=TARGET_PHASE["register"], runtime_outputs=outputs)

    def configure(self) -> "Environment":
        self.ensure_can("configure")
        self._require_outputs("configure")
        return replace(self, phase=TARGET_PHASE["configure"])

    def release(self) -> "Environment":
        self.ensure_can("release")
        self._require_outputs("release")
        return replace(self, phase=TARGET_PHASE["release"])

    def run(self) -> "Environment":
        self.ensure_can("run")
        self._require_outputs("run")
        return replace(self, phase=TARGET_PHASE["run"])

    def destroy(self) -> "Environment":
        self.ensure_can("destroy")
        return replace(self, phase=TARGET_PHASE["destroy"], runtime_outputs=None)

    def _require_outputs(self, operation: str) -> RuntimeOutputs:
        if self.runtime_outputs is None:
            raise PreconditionNotMet(
                f"cannot {operation} environment '{self.name}': "
                "no runtime outputs recorded (provision it first)"
            )
        return self.runtime_outputs
