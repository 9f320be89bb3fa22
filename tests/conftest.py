import json
import logging
from pathlib import Path

import pytest

from rigger.adapters.interface import InstanceInfo
from rigger.commands.base import CommandContext
from rigger.config.models import SshCredentials, UserInputs
from rigger.config.settings import Settings
from rigger.environment.aggregate import Environment
from rigger.errors import AdapterFailure
from rigger.observers.dispatcher import EventBus
from rigger.persistence.store import EnvironmentStore
from rigger.topology.models import Service, ServiceDeclaration


class Capture:
    def __init__(self): self.events = []
    def notify(self, ev): self.events.append(ev)

    def kinds(self):
        return [e.__class__.__name__ for e in self.events]


class FakeProvisioner:
    def __init__(self, address="10.0.0.5", fail_provision=False, fail_destroy=False):
        self.address = address
        self.fail_provision = fail_provision
        self.fail_destroy = fail_destroy
        self.provisioned = []
        self.destroyed = []

    def provision(self, working_dir):
        self.provisioned.append(Path(working_dir))
        if self.fail_provision:
            raise AdapterFailure("tofu", "apply exited non-zero", returncode=1, stderr="boom")
        return InstanceInfo(address=self.address, name="rigger-dev", provider_ids={"id": "42"})

    def destroy(self, working_dir):
        self.destroyed.append(Path(working_dir))
        if self.fail_destroy:
            raise AdapterFailure("tofu", "destroy exited non-zero", returncode=1)


class FakeConfigurator:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def configure(self, project_dir, inventory, playbooks):
        self.calls.append((Path(project_dir), inventory, list(playbooks)))
        if self.fail:
            raise AdapterFailure("ansible", "playbook configure-firewall.yml finished with status failed")


class FakeRemote:
    def __init__(self, ps_states=None, fail_wait=False):
        self.ps_states = ps_states or {}
        self.fail_wait = fail_wait
        self.commands = []
        self.uploads = []
        self.waited = False
        self.closed = False

    def wait_until_reachable(self, timeout):
        self.waited = True
        if self.fail_wait:
            raise AdapterFailure("ssh", f"not reachable after {timeout}s")

    def upload_dir(self, local_dir, remote_dir):
        self.uploads.append((Path(local_dir), remote_dir))
        return [f"{remote_dir}/{p.name}" for p in sorted(Path(local_dir).iterdir())]

    def run(self, command, *, sudo=False):
        self.commands.append(command)
        if "ps --format json" in command:
            return "\n".join(
                json.dumps({"Service": name, "State": state})
                for name, state in self.ps_states.items()
            )
        return ""

    def close(self):
        self.closed = True


class FakeHealth:
    def __init__(self, fail=False):
        self.fail = fail
        self.urls = []

    def check(self, url):
        self.urls.append(url)
        if self.fail:
            raise AdapterFailure("health-check", f"{url} answered HTTP 503")


@pytest.fixture(autouse=True)
def _reset_rigger_logger():
    yield
    logging.getLogger("rigger").handlers.clear()


@pytest.fixture
def ssh_keys(tmp_path: Path):
    private = tmp_path / "keys" / "id_ed25519"
    private.parent.mkdir()
    private.write_text("PRIVATE\n")
    public = private.with_suffix(".pub")
    public.write_text("ssh-ed25519 AAAATEST rigger@test\n")
    return private, public


@pytest.fixture
def user_inputs(ssh_keys):
    private, public = ssh_keys
    return UserInputs(
        ssh=SshCredentials(private_key_path=private, public_key_path=public),
        services=[
            ServiceDeclaration(service=Service.TRACKER),
            ServiceDeclaration(service=Service.MYSQL),
        ],
        compose_env={"MYSQL_ROOT_PASSWORD": "secret"},
    )


@pytest.fixture
def settings(tmp_path: Path):
    return Settings(working_dir=tmp_path / "work", lock_timeout=1.0)


@pytest.fixture
def store(settings):
    return EnvironmentStore(settings)


@pytest.fixture
def created_env(store, user_inputs):
    env = Environment(name="dev", user_inputs=user_inputs)
    store.save(env)
    return env


@pytest.fixture
def fakes():
    return {
        "provisioner": FakeProvisioner(),
        "configurator": FakeConfigurator(),
        "remote": FakeRemote(ps_states={"tracker": "running", "mysql": "running"}),
        "health": FakeHealth(),
        "capture": Capture(),
    }


@pytest.fixture
def ctx(settings, store, fakes):
    return CommandContext(
        settings=settings,
        store=store,
        bus=EventBus([fakes["capture"]]),
        provisioner=fakes["provisioner"],
        configurator=fakes["configurator"],
        remote_factory=lambda env: fakes["remote"],
        health=fakes["health"],
        run_id="run-1",
    )
