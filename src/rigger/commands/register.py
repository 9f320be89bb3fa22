# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/commands/register.py
from __future__ import annotations

import logging
from typing import List

from pydantic import ValidationError

from ..environment.aggregate import Environment, RuntimeOutputs
from ..errors import ConfigError
from .base import Command, CommandContext, Step

log = logging.getLogger("rigger")


def outputs_for(env: Environment, address: str) -> RuntimeOutputs:
    try:
        return RuntimeOutputs(
            address=address,
            instance_name=env.instance_name,
            provision_method="registered",
        )
    except ValidationError as exc:
        raise ConfigError(f"'{address}' is not an IP address") from exc


class RegisterCommand(Command):
    """
    created -> provisioned, for an instance that already exists (a VM, a
    physical server or a container).

    Nothing is created: the address is checked over SSH and recorded.
    `destroy` never tears a registered instance down.
    """

    operation = "register"

    def __init__(self, ctx: CommandContext, address: str):
        super().__init__(ctx)
        self.address = address

    def steps(self, env: Environment) -> List[Step]:
        return [
            ("check-address", self.check_address),
            ("wait-for-ssh", self.wait_for_ssh),
        ]

    def check_address(self, env: Environment) -> None:
        self.scratch["outputs"] = outputs_for(env, self.address)

    def wait_for_ssh(self, env: Environment) -> None:
        reachable_env = env.register(self.scratch["outputs"])
        self.remote(reachable_env).wait_until_reachable(self.settings.ssh_wait_timeout)
        log.info("[register] %s reachable at %s", env.name, self.address)

    def commit(self, env: Environment) -> Environment:
        outputs = self.scratch["outputs"]
        self.add_payload(address=outputs.address, provision_method=outputs.provision_method)
        return env.register(outputs)

    def success_message(self, env: Environment) -> str:
        return f"environment '{env.name}' registered at {env.address}"
