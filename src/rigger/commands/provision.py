# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/commands/provision.py
from __future__ import annotations

import logging
from typing import List

from ..environment.aggregate import Environment, RuntimeOutputs
from ..rendering.tofu import render_tofu_project
from .base import Command, Step

log = logging.getLogger("rigger")


class ProvisionCommand(Command):
    """
    created -> provisioned

    Renders the OpenTofu project, applies it, reads the instance address
    from the tofu outputs and waits until the instance accepts SSH.
    """

    operation = "provision"

    def steps(self, env: Environment) -> List[Step]:
        return [
            ("render-infrastructure", self.render),
            ("apply-infrastructure", self.apply),
            ("wait-for-ssh", self.wait_for_ssh),
        ]

    def tofu_dir(self, env: Environment):
        return self.settings.tofu_dir(env.name, env.user_inputs.provider.kind)

    def render(self, env: Environment) -> None:
        written = render_tofu_project(env, self.tofu_dir(env), self.ctx.renderer)
        self.add_payload(rendered=[str(p) for p in written])

    def apply(self, env: Environment) -> None:
        info = self.ctx.provisioner.provision(self.tofu_dir(env))
        self.scratch["outputs"] = RuntimeOutputs(
            address=info.address,
            instance_name=info.name or env.instance_name,
            provider_ids=dict(info.provider_ids),
        )
        log.info("[provision] %s has address %s", env.name, info.address)

    def wait_for_ssh(self, env: Environment) -> None:
        # the SSH wait needs the address, which only the provisioned view carries
        reachable_env = env.provision(self.scratch["outputs"])
        self.remote(reachable_env).wait_until_reachable(self.settings.ssh_wait_timeout)

    def commit(self, env: Environment) -> Environment:
        outputs = self.scratch["outputs"]
        self.add_payload(address=outputs.address, instance_name=outputs.instance_name)
        return env.provision(outputs)

    def success_message(self, env: Environment) -> str:
        return f"environment '{env.name}' provisioned at {env.address}"
