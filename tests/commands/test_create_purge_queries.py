import textwrap
from pathlib import Path

from rigger.commands import CreateCommand, DestroyCommand, PurgeCommand, list_environments, show_environment
from rigger.environment import Phase


def _write_config(tmp_path: Path, ssh_keys, name="dev", services="- service: tracker\n"):
    private, public = ssh_keys
    cfg = tmp_path / f"{name}.yaml"
    cfg.write_text(
        textwrap.dedent(f"""
            name: {name}
            ssh:
              private_key_path: {private}
              public_key_path: {public}
        """)
        + "services:\n"
        + textwrap.indent(services, "  ")
    )
    return cfg


def test_create_persists_created_environment(ctx, store, tmp_path, ssh_keys):
    out = CreateCommand(ctx).execute(_write_config(tmp_path, ssh_keys))
    assert out.ok, out.message
    env = store.load("dev")
    assert env.phase is Phase.CREATED
    assert env.user_inputs.services[0].service.value == "tracker"


def test_create_refuses_existing(ctx, tmp_path, ssh_keys, created_env):
    out = CreateCommand(ctx).execute(_write_config(tmp_path, ssh_keys))
    assert out.kind == "EnvironmentAlreadyExists"


def test_create_rejects_bad_name(ctx, store, tmp_path, ssh_keys):
    out = CreateCommand(ctx).execute(_write_config(tmp_path, ssh_keys, name="Prod"))
    assert out.kind == "ConfigError"
    assert store.names() == []


def test_create_rejects_impossible_topology(ctx, store, tmp_path, ssh_keys):
    services = "- service: mysql\n- service: mysql\n"
    out = CreateCommand(ctx).execute(_write_config(tmp_path, ssh_keys, services=services))
    assert out.kind == "TopologyError"
    assert not store.exists("dev")


def test_purge_requires_destroyed(ctx, store, created_env):
    out = PurgeCommand(ctx).execute("dev")
    assert out.kind == "NotDestroyed"
    assert store.exists("dev")


def test_purge_after_destroy(ctx, store, settings, created_env):
    assert DestroyCommand(ctx).execute("dev").ok
    out = PurgeCommand(ctx).execute("dev")
    assert out.ok
    assert not settings.data_dir("dev").exists()
    assert not settings.build_dir("dev").exists()


def test_forced_purge_skips_phase_check(ctx, store, settings, created_env):
    settings.build_dir("dev").mkdir(parents=True)
    out = PurgeCommand(ctx, force=True).execute("dev")
    assert out.ok
    assert out.payload["forced"] is True
    assert not store.exists("dev")
    assert not settings.build_dir("dev").exists()


def test_list_and_show(store, created_env):
    rows = list_environments(store)
    assert rows == [{"name": "dev", "phase": "created", "address": None, "error": None}]

    info = show_environment(store, "dev")
    assert info["phase"] == "created"
    assert info["services"] == ["tracker", "mysql"]
    assert info["networks"] == ["database_network"]
    assert info["ports"]["tracker"] == ["6969:6969/udp", "7070:7070", "1212:1212"]


def test_forced_purge_removes_unreadable_record(ctx, store, settings, created_env):
    settings.state_file("dev").write_text("{not json")
    settings.build_dir("dev").mkdir(parents=True)

    refused = PurgeCommand(ctx).execute("dev")
    assert refused.kind == "PersistenceFailure"
    assert store.exists("dev")

    out = PurgeCommand(ctx, force=True).execute("dev")
    assert out.ok, out.message
    assert out.payload == {"forced": True, "unreadable": True}
    assert not settings.data_dir("dev").exists()
    assert not settings.build_dir("dev").exists()


def test_forced_purge_of_missing_environment_is_not_found(ctx):
    out = PurgeCommand(ctx, force=True).execute("ghost")
    assert out.kind == "EnvironmentNotFound"


def test_create_rejects_missing_ssh_key(ctx, store, tmp_path, ssh_keys):
    cfg = _write_config(tmp_path, ssh_keys)
    ssh_keys[1].unlink()
    out = CreateCommand(ctx).execute(cfg)
    assert out.kind == "ConfigError"
    assert "does not exist" in out.message
    assert not store.exists("dev")
