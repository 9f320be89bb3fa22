# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/commands/configure.py
from __future__ import annotations

from typing import List

from ..environment.aggregate import Environment
from ..rendering.ansible import PLAYBOOKS, inventory_for, render_ansible_project
from .base import Command, Step


class ConfigureCommand(Command):
    """provisioned -> configured: docker, docker compose and the firewall."""

    operation = "configure"

    def steps(self, env: Environment) -> List[Step]:
        return [
            ("build-topology", self.topology),
            ("render-playbooks", self.render),
            ("run-playbooks", self.run_playbooks),
        ]

    def render(self, env: Environment) -> None:
        render_ansible_project(
            env, self.topology(env), self.settings.ansible_dir(env.name), self.ctx.renderer
        )

    def run_playbooks(self, env: Environment) -> None:
        self.ctx.configurator.configure(
            self.settings.ansible_dir(env.name), inventory_for(env), PLAYBOOKS
        )
        self.add_payload(playbooks=list(PLAYBOOKS))

    def commit(self, env: Environment) -> Environment:
        return env.configure()
