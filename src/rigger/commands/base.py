# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/commands/base.py
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..adapters.ansible import AnsibleClient
from ..adapters.health import HttpHealthChecker
from ..adapters.interface import (
    ConfigurationAdapter,
    HealthChecker,
    ProvisioningAdapter,
    RemoteHost,
)
from ..adapters.ssh import SSHHost
from ..adapters.tofu import OpenTofuClient
from ..config.settings import Settings
from ..environment.aggregate import Environment
from ..errors import RiggerError
from ..observers.dispatcher import EventBus
from ..observers.events import (
    CommandFailed,
    CommandStarted,
    CommandSucceeded,
    PhaseCommitted,
    StepFailed,
    StepStarted,
    StepSucceeded,
    new_ctx,
)
from ..observers.jsonfile import JsonFileObserver
from ..persistence.store import EnvironmentStore
from ..rendering.renderer import TemplateRenderer
from ..topology.aggregate import DockerComposeTopology, build

log = logging.getLogger("rigger")

RemoteFactory = Callable[[Environment], RemoteHost]


def ssh_host_for(env: Environment) -> SSHHost:
    ssh = env.user_inputs.ssh
    return SSHHost(
        address=env.address or "",
        username=ssh.username,
        private_key_path=ssh.private_key_path,
        port=ssh.port,
    )


@dataclass
class CommandContext:
    """Everything a command needs from the outside world."""

    settings: Settings
    store: EnvironmentStore
    bus: EventBus = field(default_factory=EventBus)
    renderer: TemplateRenderer = field(default_factory=TemplateRenderer)
    provisioner: ProvisioningAdapter = field(default_factory=OpenTofuClient)
    configurator: ConfigurationAdapter = field(default_factory=AnsibleClient)
    remote_factory: RemoteFactory = ssh_host_for
    health: HealthChecker = field(default_factory=HttpHealthChecker)
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    write_traces: bool = True

    @classmethod
    def default(cls, settings: Optional[Settings] = None, **overrides) -> "CommandContext":
        settings = settings or Settings()
        return cls(settings=settings, store=EnvironmentStore(settings), **overrides)


@dataclass
class StepOutcome:
    """Result of one command invocation."""

    ok: bool
    operation: str
    env_name: str
    message: str = ""
    payload: Dict[str, Any] = field(default_factory=dict)
    error: Optional[RiggerError] = None
    failed_step: Optional[str] = None
    environment: Optional[Environment] = None

    @property
    def state_preserved(self) -> bool:
        return self.error.state_preserved if self.error else True

    @property
    def kind(self) -> Optional[str]:
        return self.error.kind if self.error else None


Step = Tuple[str, Callable[[Environment], None]]


def _ms(since: float) -> int:
    return int((time.time() - since) * 1000)


class Command:
    """
    Shape shared by every lifecycle command:

      1. load the environment (EnvironmentNotFound)
      2. check the phase allows the operation (InvalidPhaseTransition)
      3. run the steps in order, each one may use what earlier ones stored
      4. commit the new phase and context (skipped when `persists` is False)
      5. on any failure stop, keep the persisted record as it was and
         report a classified error

    Subclasses provide `steps()` and `commit()`.
    """

    operation: str = ""
    # commands that only write artifacts leave the record untouched
    persists: bool = True

    def __init__(self, ctx: CommandContext):
        self.ctx = ctx
        self.scratch: Dict[str, Any] = {}
        self._current_step: Optional[str] = None
        self._trace: Optional[JsonFileObserver] = None

    # ------------------------- hooks -------------------------

    def steps(self, env: Environment) -> List[Step]:
        raise NotImplementedError

    def commit(self, env: Environment) -> Environment:
        raise NotImplementedError

    def after_commit(self, env: Environment) -> None:
        pass

    def short_circuit(self, env: Environment) -> Optional[StepOutcome]:
        """Return an outcome to finish early without running any step."""
        return None

    def success_message(self, env: Environment) -> str:
        return f"environment '{env.name}' is {env.phase}"

    # ------------------------- shared helpers -------------------------

    @property
    def settings(self) -> Settings:
        return self.ctx.settings

    def topology(self, env: Environment) -> DockerComposeTopology:
        if "topology" not in self.scratch:
            inputs = env.user_inputs
            self.scratch["topology"] = build(inputs.services, inputs.networks)
        return self.scratch["topology"]

    def remote(self, env: Environment) -> RemoteHost:
        if "remote" not in self.scratch:
            self.scratch["remote"] = self.ctx.remote_factory(env)
        return self.scratch["remote"]

    def _event_ctx(self, env_name: str) -> Dict[str, Any]:
        return new_ctx(env=env_name, command=self.operation, run_id=self.ctx.run_id)

    def _attach_trace(self, env_name: str) -> None:
        if self.ctx.write_traces:
            path = self.settings.traces_dir(env_name) / f"{self.ctx.run_id}.jsonl"
            self._trace = JsonFileObserver(path)
            self.ctx.bus.subscribe(self._trace)

    def _detach_trace(self) -> None:
        if self._trace is not None:
            self.ctx.bus.unsubscribe(self._trace)
            self._trace = None

    # ------------------------- driver -------------------------

    def execute(self, env_name: str) -> StepOutcome:
        return self._drive(env_name, lambda: self.ctx.store.load(env_name))

    def _drive(
        self, env_name: str, load: Callable[[], Environment], trace: bool = True
    ) -> StepOutcome:
        started = time.time()
        self.scratch = {}
        self._current_step = None
        bus = self.ctx.bus

        try:
            env = load()
            if trace:
                self._attach_trace(env_name)

            early = self.short_circuit(env)
            if early is not None:
                bus.emit(CommandSucceeded(
                    phase=env.phase.value, duration_ms=_ms(started),
                    message=early.message, **self._event_ctx(env_name),
                ))
                return early

            env.ensure_can(self.operation)
            plan = self.steps(env)
            bus.emit(CommandStarted(
                phase=env.phase.value, steps=[name for name, _ in plan],
                **self._event_ctx(env_name),
            ))

            for name, fn in plan:
                self._run_step(env, name, fn)
            self._current_step = None

            new_env = self.commit(env)
            if self.persists:
                self.ctx.store.save(new_env)
                bus.emit(PhaseCommitted(
                    previous=env.phase.value, phase=new_env.phase.value,
                    **self._event_ctx(env_name),
                ))
                log.info("[%s] %s: %s -> %s", self.operation, env_name, env.phase, new_env.phase)

            self.after_commit(new_env)

            message = self.success_message(new_env)
            bus.emit(CommandSucceeded(
                phase=new_env.phase.value, duration_ms=_ms(started), message=message,
                **self._event_ctx(env_name),
            ))
        except RiggerError as exc:
            log.error("[%s] %s failed: %s", self.operation, env_name, exc)
            bus.emit(CommandFailed(
                kind=exc.kind, error=str(exc), failed_step=self._current_step,
                state_preserved=exc.state_preserved, duration_ms=_ms(started),
                **self._event_ctx(env_name),
            ))
            return StepOutcome(
                ok=False,
                operation=self.operation,
                env_name=env_name,
                message=str(exc),
                error=exc,
                failed_step=self._current_step,
            )
        finally:
            self._close_remote()
            self._detach_trace()

        return StepOutcome(
            ok=True,
            operation=self.operation,
            env_name=env_name,
            message=message,
            payload=dict(self.scratch.get("payload", {})),
            environment=new_env,
        )

    def _run_step(self, env: Environment, name: str, fn: Callable[[Environment], None]) -> None:
        self._current_step = name
        t0 = time.time()
        self.ctx.bus.emit(StepStarted(step=name, **self._event_ctx(env.name)))
        try:
            fn(env)
        except RiggerError as exc:
            self.ctx.bus.emit(StepFailed(
                step=name, kind=exc.kind, error=str(exc), **self._event_ctx(env.name),
            ))
            raise
        self.ctx.bus.emit(StepSucceeded(step=name, duration_ms=_ms(t0), **self._event_ctx(env.name)))

    def _close_remote(self) -> None:
        remote = self.scratch.get("remote")
        if remote is not None:
            remote.close()

    def add_payload(self, **values: Any) -> None:
        self.scratch.setdefault("payload", {}).update(values)
