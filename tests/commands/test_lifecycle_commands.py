import json

from rigger.commands import (
    ConfigureCommand,
    DestroyCommand,
    ProvisionCommand,
    ReleaseCommand,
    RunCommand,
)
from rigger.environment import Phase
from rigger.observers.events import CommandFailed, PhaseCommitted, StepFailed


def _provisioned(ctx):
    out = ProvisionCommand(ctx).execute("dev")
    assert out.ok, out.message
    return out


def test_provision_success_records_address(ctx, store, settings, fakes, created_env):
    out = _provisioned(ctx)

    env = store.load("dev")
    assert env.phase is Phase.PROVISIONED
    assert env.runtime_outputs.address == "10.0.0.5"
    assert out.payload["address"] == "10.0.0.5"
    assert fakes["provisioner"].provisioned == [settings.tofu_dir("dev", "lxd")]
    assert fakes["remote"].waited
    assert (settings.tofu_dir("dev", "lxd") / "main.tf").is_file()
    assert any(isinstance(e, PhaseCommitted) for e in fakes["capture"].events)


def test_configure_after_provision_uses_address(ctx, store, fakes, created_env):
    _provisioned(ctx)
    out = ConfigureCommand(ctx).execute("dev")

    assert out.ok, out.message
    assert store.load("dev").phase is Phase.CONFIGURED
    project_dir, inventory, playbooks = fakes["configurator"].calls[0]
    assert inventory.address == "10.0.0.5"
    assert playbooks == ["install-docker.yml", "install-docker-compose.yml", "configure-firewall.yml"]
    assert (project_dir / "configure-firewall.yml").is_file()


def test_provision_failure_keeps_created(ctx, store, fakes, created_env):
    fakes["provisioner"].fail_provision = True
    out = ProvisionCommand(ctx).execute("dev")

    assert not out.ok
    assert out.kind == "AdapterFailure"
    assert out.failed_step == "apply-infrastructure"
    assert out.state_preserved
    env = store.load("dev")
    assert env.phase is Phase.CREATED
    assert env.runtime_outputs is None

    failed = [e for e in fakes["capture"].events if isinstance(e, CommandFailed)]
    assert failed and failed[0].failed_step == "apply-infrastructure"
    assert any(isinstance(e, StepFailed) for e in fakes["capture"].events)


def test_configure_from_created_is_rejected(ctx, store, fakes, created_env):
    out = ConfigureCommand(ctx).execute("dev")

    assert out.kind == "InvalidPhaseTransition"
    assert store.load("dev").phase is Phase.CREATED
    assert fakes["configurator"].calls == []


def test_unknown_environment(ctx):
    out = ProvisionCommand(ctx).execute("ghost")
    assert out.kind == "EnvironmentNotFound"


def test_invalid_name_is_classified(ctx):
    out = ProvisionCommand(ctx).execute("Bad_Name")
    assert out.kind == "ConfigError"


def test_configure_failure_keeps_provisioned(ctx, store, fakes, created_env):
    _provisioned(ctx)
    fakes["configurator"].fail = True
    out = ConfigureCommand(ctx).execute("dev")

    assert out.kind == "AdapterFailure"
    assert out.failed_step == "run-playbooks"
    assert store.load("dev").phase is Phase.PROVISIONED


def test_release_and_run(ctx, store, settings, fakes, created_env):
    _provisioned(ctx)
    assert ConfigureCommand(ctx).execute("dev").ok

    rel = ReleaseCommand(ctx).execute("dev")
    assert rel.ok, rel.message
    compose_dir = settings.compose_dir("dev")
    assert (compose_dir / "docker-compose.yml").is_file()
    assert "MYSQL_ROOT_PASSWORD=secret" in (compose_dir / ".env").read_text()
    tracker_toml = compose_dir / "storage" / "tracker" / "etc" / "tracker.toml"
    assert 'driver = "mysql"' in tracker_toml.read_text()
    assert rel.payload["service_configs"] == ["storage/tracker/etc/tracker.toml"]
    assert fakes["remote"].uploads == [(compose_dir, "/opt/torrust")]
    assert store.load("dev").phase is Phase.RELEASED

    run = RunCommand(ctx).execute("dev")
    assert run.ok, run.message
    assert store.load("dev").phase is Phase.RUNNING
    assert any("up -d" in c for c in fakes["remote"].commands)
    assert fakes["health"].urls == ["http://10.0.0.5:1212/api/health_check"]
    assert fakes["remote"].closed


def test_run_fails_when_a_container_is_not_running(ctx, store, fakes, created_env):
    _provisioned(ctx)
    ConfigureCommand(ctx).execute("dev")
    ReleaseCommand(ctx).execute("dev")
    fakes["remote"].ps_states = {"tracker": "running", "mysql": "exited"}

    out = RunCommand(ctx).execute("dev")
    assert out.kind == "AdapterFailure"
    assert "mysql (exited)" in out.message
    assert store.load("dev").phase is Phase.RELEASED
    assert fakes["health"].urls == []


def test_destroy_twice_calls_provider_once(ctx, store, settings, fakes, created_env):
    _provisioned(ctx)

    first = DestroyCommand(ctx).execute("dev")
    assert first.ok
    assert first.payload["already_destroyed"] is False
    assert not settings.build_dir("dev").exists()

    second = DestroyCommand(ctx).execute("dev")
    assert second.ok
    assert second.payload["already_destroyed"] is True
    assert len(fakes["provisioner"].destroyed) == 1

    env = store.load("dev")
    assert env.phase is Phase.DESTROYED
    assert env.runtime_outputs is None


def test_destroy_failure_preserves_state_and_artifacts(ctx, store, settings, fakes, created_env):
    _provisioned(ctx)
    fakes["provisioner"].fail_destroy = True

    out = DestroyCommand(ctx).execute("dev")
    assert out.kind == "AdapterFailure"
    assert out.state_preserved
    env = store.load("dev")
    assert env.phase is Phase.PROVISIONED
    assert env.address == "10.0.0.5"
    assert settings.tofu_dir("dev", "lxd").is_dir()


def test_destroy_created_skips_provider(ctx, store, fakes, created_env):
    out = DestroyCommand(ctx).execute("dev")
    assert out.ok
    assert fakes["provisioner"].destroyed == []
    assert store.load("dev").phase is Phase.DESTROYED


def test_trace_file_written(ctx, settings, created_env):
    _provisioned(ctx)
    trace = settings.traces_dir("dev") / "run-1.jsonl"
    lines = [json.loads(line) for line in trace.read_text().splitlines()]
    assert lines[0]["command"] == "provision"
    assert any(line.get("phase") == "provisioned" for line in lines)


def test_destroy_after_failed_ssh_wait_destroys_applied_instance(ctx, store, settings, fakes, created_env):
    fakes["remote"].fail_wait = True
    out = ProvisionCommand(ctx).execute("dev")
    assert out.failed_step == "wait-for-ssh"
    assert store.load("dev").phase is Phase.CREATED

    tofu_dir = settings.tofu_dir("dev", "lxd")
    (tofu_dir / "terraform.tfstate").write_text('{"resources": ["lxd_instance.env"]}')

    destroyed = DestroyCommand(ctx).execute("dev")
    assert destroyed.ok, destroyed.message
    assert fakes["provisioner"].destroyed == [tofu_dir]
    assert destroyed.payload["infrastructure_destroyed"] is True
    assert store.load("dev").phase is Phase.DESTROYED


def test_destroy_failure_after_failed_provision_keeps_tofu_state(ctx, store, settings, fakes, created_env):
    fakes["remote"].fail_wait = True
    ProvisionCommand(ctx).execute("dev")
    fakes["provisioner"].fail_destroy = True

    out = DestroyCommand(ctx).execute("dev")
    assert out.kind == "AdapterFailure"
    assert out.failed_step == "destroy-infrastructure"
    assert store.load("dev").phase is Phase.CREATED
    assert (settings.tofu_dir("dev", "lxd") / "main.tf").is_file()


def test_health_url_brackets_ipv6_address(ctx, fakes, created_env):
    fakes["provisioner"].address = "2001:db8::5"
    _provisioned(ctx)
    assert ConfigureCommand(ctx).execute("dev").ok
    assert ReleaseCommand(ctx).execute("dev").ok

    out = RunCommand(ctx).execute("dev")
    assert out.ok, out.message
    assert fakes["health"].urls == ["http://[2001:db8::5]:1212/api/health_check"]


def test_unwritable_build_dir_is_classified(ctx, store, settings, created_env):
    settings.working_dir.mkdir(parents=True, exist_ok=True)
    settings.build_root.write_text("not a directory")

    out = ProvisionCommand(ctx).execute("dev")
    assert out.kind == "PersistenceFailure"
    assert out.failed_step == "render-infrastructure"
    assert store.load("dev").phase is Phase.CREATED
