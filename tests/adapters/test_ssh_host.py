from pathlib import Path

import paramiko
import pytest

import rigger.adapters.ssh as ssh_mod
from rigger.adapters.ssh import SSHHost
from rigger.errors import AdapterFailure


class DummyChannel:
    def __init__(self, rc):
        self.rc = rc

    def recv_exit_status(self):
        return self.rc


class DummyStream:
    def __init__(self, data=b"", rc=0):
        self.data = data
        self.channel = DummyChannel(rc)

    def read(self):
        return self.data


class DummySFTP:
    def __init__(self, fail_put=None):
        self.fail_put = fail_put
        self.dirs = []
        self.puts = []
        self.closed = False

    def mkdir(self, path):
        if path in self.dirs:
            raise IOError(f"{path} exists")
        self.dirs.append(path)

    def put(self, local, remote):
        if self.fail_put and remote.endswith(self.fail_put):
            raise IOError("No space left on device")
        self.puts.append((local, remote))

    def close(self):
        self.closed = True


class DummyClient:
    def __init__(self, factory):
        self.factory = factory
        self.commands = []
        self.closed = False
        self.sftp = DummySFTP(fail_put=factory.fail_put)

    def set_missing_host_key_policy(self, policy):
        self.policy = policy

    def connect(self, **kwargs):
        if self.factory.refuse > 0:
            self.factory.refuse -= 1
            raise ConnectionRefusedError(111, "Connection refused")
        self.kwargs = kwargs

    def exec_command(self, command, timeout=None):
        self.commands.append(command)
        rc, out, err = self.factory.results.get(command, (0, b"", b""))
        return None, DummyStream(out, rc), DummyStream(err, rc)

    def open_sftp(self):
        return self.sftp

    def close(self):
        self.closed = True


class ClientFactory:
    def __init__(self):
        self.clients = []
        self.refuse = 0
        self.results = {}
        self.fail_put = None

    def __call__(self):
        client = DummyClient(self)
        self.clients.append(client)
        return client


class Clock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clients(monkeypatch):
    factory = ClientFactory()
    monkeypatch.setattr(paramiko, "SSHClient", factory)
    monkeypatch.setattr(ssh_mod, "_load_pkey", lambda path: None)
    return factory


@pytest.fixture
def clock(monkeypatch):
    c = Clock()
    monkeypatch.setattr(ssh_mod.time, "monotonic", c.monotonic)
    monkeypatch.setattr(ssh_mod.time, "sleep", c.sleep)
    return c


def _host(tmp_path: Path) -> SSHHost:
    return SSHHost(address="10.0.0.5", username="torrust", private_key_path=tmp_path / "id", port=2222)


def test_run_returns_stdout_and_reuses_connection(clients, tmp_path):
    clients.results["uptime"] = (0, b"up 3 days\n", b"")
    host = _host(tmp_path)

    assert host.run("uptime") == "up 3 days\n"
    host.run("mkdir -p /opt/torrust", sudo=True)

    assert len(clients.clients) == 1
    client = clients.clients[0]
    assert client.kwargs["hostname"] == "10.0.0.5"
    assert client.kwargs["port"] == 2222
    assert client.kwargs["username"] == "torrust"
    assert client.commands == ["uptime", "sudo -n bash -c 'mkdir -p /opt/torrust'"]


def test_run_non_zero_exit_raises_adapter_failure(clients, tmp_path):
    clients.results["docker compose up -d"] = (17, b"", b"no such service: tracker\n")

    with pytest.raises(AdapterFailure) as ei:
        _host(tmp_path).run("docker compose up -d")
    assert ei.value.tool == "ssh"
    assert ei.value.returncode == 17
    assert "no such service" in ei.value.stderr


def test_connection_refused_is_classified(clients, tmp_path):
    clients.refuse = 1
    with pytest.raises(AdapterFailure) as ei:
        _host(tmp_path).run("true")
    assert "cannot connect to torrust@10.0.0.5:2222" in str(ei.value)


def test_wait_until_reachable_retries_until_connected(clients, clock, tmp_path):
    clients.refuse = 2
    host = _host(tmp_path)

    host.wait_until_reachable(timeout=60, interval=5.0)

    assert clock.sleeps == [5.0, 5.0]
    assert len(clients.clients) == 3
    # the successful connection is kept for later commands
    host.run("true")
    assert clients.clients[2].commands == ["true"]
    assert len(clients.clients) == 3


def test_wait_until_reachable_gives_up_at_deadline(clients, clock, tmp_path):
    clients.refuse = 100

    with pytest.raises(AdapterFailure) as ei:
        _host(tmp_path).wait_until_reachable(timeout=12, interval=5.0)

    assert "not reachable after 12s" in str(ei.value)
    assert clock.sleeps == [5.0, 5.0, 5.0]
    assert clock.now >= 12


def test_upload_dir_is_recursive(clients, tmp_path):
    local = tmp_path / "docker-compose"
    (local / "storage" / "tracker" / "etc").mkdir(parents=True)
    (local / "docker-compose.yml").write_text("services: {}\n")
    (local / "storage" / "tracker" / "etc" / "tracker.toml").write_text("[core]\n")

    uploaded = _host(tmp_path).upload_dir(local, "/opt/torrust")

    assert uploaded == [
        "/opt/torrust/docker-compose.yml",
        "/opt/torrust/storage/tracker/etc/tracker.toml",
    ]
    client = clients.clients[0]
    assert client.commands[0] == "sudo -n bash -c 'mkdir -p /opt/torrust'"
    assert client.commands[1] == "sudo -n bash -c 'chown -R torrust /opt/torrust'"
    assert client.sftp.dirs == [
        "/opt/torrust",
        "/opt/torrust/storage",
        "/opt/torrust/storage/tracker",
        "/opt/torrust/storage/tracker/etc",
    ]
    assert client.sftp.closed


def test_upload_dir_failure_closes_sftp(clients, tmp_path):
    clients.fail_put = ".env"
    local = tmp_path / "docker-compose"
    local.mkdir()
    (local / ".env").write_text("A=1\n")

    with pytest.raises(AdapterFailure) as ei:
        _host(tmp_path).upload_dir(local, "/opt/torrust")

    assert "upload to /opt/torrust failed" in str(ei.value)
    assert clients.clients[0].sftp.closed


def test_close_drops_connection(clients, tmp_path):
    host = _host(tmp_path)
    host.run("true")
    host.close()
    assert clients.clients[0].closed

    host.run("true")
    assert len(clients.clients) == 2
