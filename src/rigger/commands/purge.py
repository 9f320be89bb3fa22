# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/commands/purge.py
from __future__ import annotations

import logging
import shutil
from typing import Optional

from ..environment.state import Phase, can
from ..errors import NotDestroyed, PersistenceFailure, RiggerError
from ..observers.events import CommandFailed, CommandSucceeded, new_ctx
from .base import CommandContext, StepOutcome

log = logging.getLogger("rigger")


class PurgeCommand:
    """
    Remove every local trace of an environment: data/<env> and build/<env>.

    Only destroyed environments can be purged unless `force` is set; purging
    a live environment with `force` leaves its instance running. With
    `force` an unreadable record is purged as well, as long as it exists.
    """

    operation = "purge"

    def __init__(self, ctx: CommandContext, force: bool = False):
        self.ctx = ctx
        self.force = force

    def _emit_ctx(self, name: str) -> dict:
        return new_ctx(env=name, command=self.operation, run_id=self.ctx.run_id)

    def _current_phase(self, env_name: str) -> Optional[Phase]:
        """Phase of the stored record, or None for an unreadable one purged by force."""
        try:
            return self.ctx.store.load(env_name).phase
        except PersistenceFailure as exc:
            if not (self.force and self.ctx.store.exists(env_name)):
                raise
            log.warning("[purge] record of %s is unreadable (%s); purging anyway", env_name, exc)
            return None

    def execute(self, env_name: str) -> StepOutcome:
        settings = self.ctx.settings
        try:
            phase = self._current_phase(env_name)
            if phase is not None and not can(self.operation, phase):
                if not self.force:
                    raise NotDestroyed(env_name, phase.value)
                log.warning(
                    "[purge] forcing purge of %s in phase %s; its instance is NOT destroyed",
                    env_name, phase,
                )

            build_dir = settings.build_dir(env_name)
            if build_dir.exists():
                try:
                    shutil.rmtree(build_dir)
                except OSError as exc:
                    raise PersistenceFailure(f"cannot remove {build_dir}: {exc}") from exc
            self.ctx.store.delete(env_name)
        except RiggerError as exc:
            log.error("[purge] %s failed: %s", env_name, exc)
            self.ctx.bus.emit(CommandFailed(
                kind=exc.kind, error=str(exc), failed_step=None,
                state_preserved=exc.state_preserved, duration_ms=0,
                **self._emit_ctx(env_name),
            ))
            return StepOutcome(
                ok=False, operation=self.operation, env_name=env_name,
                message=str(exc), error=exc,
            )

        message = f"environment '{env_name}' purged"
        self.ctx.bus.emit(CommandSucceeded(
            phase="purged", duration_ms=0, message=message, **self._emit_ctx(env_name),
        ))
        return StepOutcome(
            ok=True, operation=self.operation, env_name=env_name, message=message,
            payload={"forced": phase is not Phase.DESTROYED, "unreadable": phase is None},
        )
