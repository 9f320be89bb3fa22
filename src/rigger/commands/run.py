# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/commands/run.py
from __future__ import annotations

import ipaddress
import json
import logging
import shlex
from typing import Dict, List

from ..environment.aggregate import Environment
from ..errors import AdapterFailure
from ..topology.models import Service
from .base import Command, Step

log = logging.getLogger("rigger")


def parse_compose_ps(stdout: str) -> Dict[str, str]:
    """
    Map service name -> container state from `docker compose ps --format json`.

    Compose v2 prints one JSON object per line; older releases print a
    single JSON array.
    """
    text = stdout.strip()
    if not text:
        return {}
    try:
        if text.startswith("["):
            rows = json.loads(text)
        else:
            rows = [json.loads(line) for line in text.splitlines() if line.strip()]
    except json.JSONDecodeError as exc:
        raise AdapterFailure("docker compose", f"cannot parse 'ps' output: {exc}") from exc

    states: Dict[str, str] = {}
    for row in rows:
        name = row.get("Service") or row.get("Name")
        if name:
            states[name] = str(row.get("State", "")).lower()
    return states


def url_host(address: str) -> str:
    """Host part of a URL; IPv6 literals go in brackets."""
    if ipaddress.ip_address(address).version == 6:
        return f"[{address}]"
    return address


class RunCommand(Command):
    """
    released -> running

    Starts the released stack with docker compose, checks every declared
    service has a running container and checks the tracker health endpoint.
    """

    operation = "run"

    def steps(self, env: Environment) -> List[Step]:
        return [
            ("build-topology", self.topology),
            ("start-services", self.start),
            ("check-containers", self.check_containers),
            ("check-health", self.check_health),
        ]

    def _compose(self, args: str) -> str:
        return f"cd {shlex.quote(self.settings.remote_deploy_dir)} && docker compose {args}"

    def start(self, env: Environment) -> None:
        self.remote(env).run(self._compose("up -d --remove-orphans"))

    def check_containers(self, env: Environment) -> None:
        states = parse_compose_ps(self.remote(env).run(self._compose("ps --format json")))
        expected = self.topology(env).service_names()
        not_running = [s for s in expected if states.get(s) != "running"]
        if not_running:
            raise AdapterFailure(
                "docker compose",
                "services not running: "
                + ", ".join(f"{s} ({states.get(s, 'missing')})" for s in not_running),
            )
        self.add_payload(containers=states)

    def check_health(self, env: Environment) -> None:
        if not self.topology(env).has(Service.TRACKER):
            log.info("[run] no tracker declared; skipping health check")
            return
        inputs = env.user_inputs
        url = f"http://{url_host(env.address)}:{inputs.health_check_port}{inputs.health_check_path}"
        self.ctx.health.check(url)
        self.add_payload(health_check=url)

    def commit(self, env: Environment) -> Environment:
        return env.run()

    def success_message(self, env: Environment) -> str:
        return f"environment '{env.name}' is running at {env.address}"
