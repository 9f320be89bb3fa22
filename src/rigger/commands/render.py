# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/commands/render.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from ..config.loader import load_config
from ..config.models import EnvironmentConfig
from ..environment.aggregate import Environment
from ..errors import PreconditionNotMet, RiggerError
from ..rendering.ansible import render_ansible_project
from ..rendering.compose import render_compose_project
from ..rendering.services import render_service_configs
from ..rendering.tofu import render_tofu_project
from .base import Command, CommandContext, Step, StepOutcome
from .create import validated_inputs
from .register import outputs_for

log = logging.getLogger("rigger")


class RenderCommand(Command):
    """
    Write every artifact of an environment into build/<env> without
    touching any infrastructure: the OpenTofu project, the Ansible
    playbooks and inventory, the compose project and the configuration
    file of each service.

    Works on an environment still in `created` (`execute`) or straight from
    a config file without creating anything (`execute_config`). `address`
    stands in for the address provisioning would discover.
    """

    operation = "render"
    persists = False

    def __init__(self, ctx: CommandContext, address: str):
        super().__init__(ctx)
        self.address = address

    def execute_config(self, config: Union[str, Path, EnvironmentConfig]) -> StepOutcome:
        try:
            cfg = config if isinstance(config, EnvironmentConfig) else load_config(config)
        except RiggerError as exc:
            log.error("[render] %s failed: %s", config, exc)
            return StepOutcome(
                ok=False, operation=self.operation, env_name=str(config),
                message=str(exc), error=exc,
            )

        def from_config() -> Environment:
            inputs = validated_inputs(cfg)
            if self.ctx.store.exists(cfg.name):
                raise PreconditionNotMet(
                    f"environment '{cfg.name}' already exists; render it by name instead"
                )
            return Environment(name=cfg.name, user_inputs=inputs)

        # nothing is persisted for a config-only render, traces included
        return self._drive(cfg.name, from_config, trace=False)

    def steps(self, env: Environment) -> List[Step]:
        return [
            ("check-address", self.check_address),
            ("build-topology", self.topology),
            ("render-infrastructure", self.render_infrastructure),
            ("render-playbooks", self.render_playbooks),
            ("render-compose", self.render_compose),
            ("render-service-configs", self.render_configs),
        ]

    def check_address(self, env: Environment) -> None:
        # the provisioned view carries the address into the inventory
        self.scratch["view"] = env.provision(outputs_for(env, self.address))

    def render_infrastructure(self, env: Environment) -> None:
        render_tofu_project(
            env, self.settings.tofu_dir(env.name, env.user_inputs.provider.kind), self.ctx.renderer
        )

    def render_playbooks(self, env: Environment) -> None:
        render_ansible_project(
            self.scratch["view"], self.topology(env), self.settings.ansible_dir(env.name), self.ctx.renderer
        )

    def render_compose(self, env: Environment) -> None:
        render_compose_project(env, self.topology(env), self.settings.compose_dir(env.name), self.ctx.renderer)

    def render_configs(self, env: Environment) -> None:
        render_service_configs(env, self.topology(env), self.settings.compose_dir(env.name), self.ctx.renderer)

    def commit(self, env: Environment) -> Environment:
        build_dir = self.settings.build_dir(env.name)
        self.add_payload(build_dir=str(build_dir), address=self.address)
        return env

    def success_message(self, env: Environment) -> str:
        return f"artifacts for '{env.name}' written to {self.settings.build_dir(env.name)}"
