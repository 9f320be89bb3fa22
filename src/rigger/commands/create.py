# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/commands/create.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from ..config.loader import load_config
from ..config.models import EnvironmentConfig, UserInputs
from ..environment.aggregate import Environment
from ..environment.name import validate_name
from ..errors import ConfigError, EnvironmentAlreadyExists, RiggerError
from ..observers.events import CommandFailed, CommandSucceeded, new_ctx
from ..topology.aggregate import build
from .base import CommandContext, StepOutcome

log = logging.getLogger("rigger")


def validated_inputs(cfg: EnvironmentConfig) -> UserInputs:
    """
    Run every check a config must pass before an environment is created:
    the name rules, readable SSH key files and a valid service topology.
    """
    validate_name(cfg.name)
    for key in (cfg.ssh.private_key_path, cfg.ssh.public_key_path):
        if not key.is_file():
            raise ConfigError(f"SSH key file {key} does not exist")

    inputs = UserInputs.model_validate(cfg.model_dump(exclude={"name"}))
    # reject impossible service layouts now rather than at release time
    build(inputs.services, inputs.networks)
    return inputs


class CreateCommand:
    """Persist a new environment in phase `created` from a config file."""

    operation = "create"

    def __init__(self, ctx: CommandContext):
        self.ctx = ctx

    def execute(self, config: Union[str, Path, EnvironmentConfig]) -> StepOutcome:
        name = config.name if isinstance(config, EnvironmentConfig) else str(config)
        try:
            cfg = config if isinstance(config, EnvironmentConfig) else load_config(config)
            name = cfg.name
            inputs = validated_inputs(cfg)
            if self.ctx.store.exists(name):
                raise EnvironmentAlreadyExists(name)

            env = Environment(name=name, user_inputs=inputs)
            self.ctx.store.save(env)
        except RiggerError as exc:
            log.error("[create] %s failed: %s", name, exc)
            self.ctx.bus.emit(CommandFailed(
                kind=exc.kind, error=str(exc), failed_step=None,
                state_preserved=exc.state_preserved, duration_ms=0,
                **new_ctx(env=name, command=self.operation, run_id=self.ctx.run_id),
            ))
            return StepOutcome(
                ok=False, operation=self.operation, env_name=name,
                message=str(exc), error=exc,
            )

        log.info("[create] environment %s created", name)
        message = f"environment '{name}' created"
        self.ctx.bus.emit(CommandSucceeded(
            phase=env.phase.value, duration_ms=0, message=message,
            **new_ctx(env=name, command=self.operation, run_id=self.ctx.run_id),
        ))
        return StepOutcome(
            ok=True, operation=self.operation, env_name=name, message=message, environment=env,
        )
