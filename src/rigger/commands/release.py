# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/commands/release.py
from __future__ import annotations

from typing import List

from ..environment.aggregate import Environment
from ..rendering.compose import render_compose_project
from ..rendering.services import render_service_configs
from .base import Command, Step


class ReleaseCommand(Command):
    """
    configured -> released

    Builds the service topology from the environment's declarations,
    renders docker-compose.yml, .env and the configuration file of every
    enabled service, then uploads the project to the instance.
    Releasing again from released or running re-uploads the artifacts.
    """

    operation = "release"

    def steps(self, env: Environment) -> List[Step]:
        return [
            ("build-topology", self.topology),
            ("render-compose", self.render),
            ("render-service-configs", self.render_configs),
            ("upload-artifacts", self.upload),
        ]

    def render(self, env: Environment) -> None:
        topology = self.topology(env)
        render_compose_project(env, topology, self.settings.compose_dir(env.name), self.ctx.renderer)
        self.add_payload(services=topology.service_names(), networks=list(topology.networks))

    def render_configs(self, env: Environment) -> None:
        compose_dir = self.settings.compose_dir(env.name)
        written = render_service_configs(env, self.topology(env), compose_dir, self.ctx.renderer)
        self.add_payload(service_configs=[str(p.relative_to(compose_dir)) for p in written])

    def upload(self, env: Environment) -> None:
        uploaded = self.remote(env).upload_dir(
            self.settings.compose_dir(env.name), self.settings.remote_deploy_dir
        )
        self.add_payload(uploaded=uploaded)

    def commit(self, env: Environment) -> Environment:
        return env.release()
