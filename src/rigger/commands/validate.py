# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/commands/validate.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from ..config.loader import load_config
from ..config.models import EnvironmentConfig
from ..errors import RiggerError
from ..topology.aggregate import build
from .base import CommandContext, StepOutcome
from .create import validated_inputs

log = logging.getLogger("rigger")


class ValidateCommand:
    """Run the checks of `create` on a config file without creating anything."""

    operation = "validate"

    def __init__(self, ctx: CommandContext):
        self.ctx = ctx

    def execute(self, config: Union[str, Path, EnvironmentConfig]) -> StepOutcome:
        name = config.name if isinstance(config, EnvironmentConfig) else str(config)
        try:
            cfg = config if isinstance(config, EnvironmentConfig) else load_config(config)
            name = cfg.name
            inputs = validated_inputs(cfg)
        except RiggerError as exc:
            log.error("[validate] %s is invalid: %s", name, exc)
            return StepOutcome(
                ok=False, operation=self.operation, env_name=name,
                message=str(exc), error=exc,
            )

        topology = build(inputs.services, inputs.networks)
        log.info("[validate] configuration for %s is valid", name)
        return StepOutcome(
            ok=True,
            operation=self.operation,
            env_name=name,
            message=f"configuration for '{name}' is valid",
            payload={
                "provider": inputs.provider.kind,
                "services": topology.service_names(),
                "networks": list(topology.networks),
                "https": inputs.https is not None,
                "exists": self.ctx.store.exists(name),
            },
        )
