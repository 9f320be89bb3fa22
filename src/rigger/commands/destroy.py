# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/commands/destroy.py
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from ..environment.aggregate import Environment
from ..environment.state import Phase
from ..errors import AdapterFailure
from .base import Command, Step, StepOutcome

log = logging.getLogger("rigger")


class DestroyCommand(Command):
    """
    any phase -> destroyed

    Idempotent: an environment that is already destroyed succeeds without
    touching the provider. If the provider fails, the record and the build
    directory stay as they were so the user can retry or clean up by hand.

    The provider is asked to destroy whenever an OpenTofu working directory
    exists, whatever the phase: a provision that applied but never committed
    leaves a live instance behind an environment still in `created`.
    Registered instances are never destroyed.
    """

    operation = "destroy"

    def short_circuit(self, env: Environment) -> Optional[StepOutcome]:
        if env.phase is Phase.DESTROYED:
            log.info("[destroy] %s is already destroyed; nothing to do", env.name)
            return StepOutcome(
                ok=True,
                operation=self.operation,
                env_name=env.name,
                message=f"environment '{env.name}' already destroyed",
                payload={"already_destroyed": True},
                environment=env,
            )
        return None

    def tofu_dir(self, env: Environment) -> Path:
        return self.settings.tofu_dir(env.name, env.user_inputs.provider.kind)

    def steps(self, env: Environment) -> List[Step]:
        if not env.is_managed:
            log.warning(
                "[destroy] %s was registered from an existing instance at %s; "
                "it will NOT be destroyed and must be removed manually",
                env.name, env.address,
            )
            self.add_payload(registered=True)
            return []
        if env.phase is Phase.CREATED and not self.tofu_dir(env).is_dir():
            log.info("[destroy] %s was never provisioned; skipping infrastructure", env.name)
            return []
        return [("destroy-infrastructure", self.destroy_infrastructure)]

    def destroy_infrastructure(self, env: Environment) -> None:
        tofu_dir = self.tofu_dir(env)
        if not tofu_dir.is_dir():
            raise AdapterFailure(
                "tofu",
                f"no OpenTofu state directory at {tofu_dir}; "
                f"the instance {env.instance_name} must be removed manually",
            )
        self.ctx.provisioner.destroy(tofu_dir)
        self.add_payload(infrastructure_destroyed=True)

    def commit(self, env: Environment) -> Environment:
        self.add_payload(already_destroyed=False)
        return env.destroy()

    def after_commit(self, env: Environment) -> None:
        build_dir = self.settings.build_dir(env.name)
        if not build_dir.exists():
            return
        try:
            shutil.rmtree(build_dir)
        except OSError as exc:
            # the environment is destroyed either way; leftovers are only local files
            log.warning("[destroy] could not remove %s: %s", build_dir, exc)
            self.add_payload(leftover_build_dir=str(build_dir))
            return
        log.info("[destroy] removed build directory %s", build_dir)

    def success_message(self, env: Environment) -> str:
        return f"environment '{env.name}' destroyed"
