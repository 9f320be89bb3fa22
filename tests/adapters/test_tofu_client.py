import json
import subprocess
from pathlib import Path

import pytest

from rigger.adapters.tofu import OpenTofuClient, parse_instance_info
from rigger.errors import AdapterFailure


class DummyCP:
    def __init__(self, rc=0, out="", err=""):
        self.returncode = rc
        self.stdout = out
        self.stderr = err


OUTPUT = json.dumps({
    "instance_info": {
        "value": {
            "ip_address": "10.0.0.5",
            "name": "rigger-dev",
            "image": "ubuntu:24.04",
            "status": "Running",
            "ids": {"instance": 17},
        }
    }
})


def test_provision_runs_tofu_in_order(monkeypatch, tmp_path: Path):
    calls = []

    def fake_run(argv, **kwargs):
        calls.append((argv, kwargs.get("cwd")))
        return DummyCP(0, out=OUTPUT if argv[1] == "output" else "")

    monkeypatch.setattr(subprocess, "run", fake_run)

    info = OpenTofuClient().provision(tmp_path)

    assert [argv[1] for argv, _ in calls] == ["init", "validate", "plan", "apply", "output"]
    assert calls[3][0] == ["tofu", "apply", "-input=false", "-auto-approve"]
    assert all(cwd == str(tmp_path) for _, cwd in calls)
    assert info.address == "10.0.0.5"
    assert info.provider_ids == {"instance": "17"}


def test_non_zero_exit_raises_adapter_failure(monkeypatch, tmp_path: Path):
    def fake_run(argv, **kwargs):
        return DummyCP(1, err="Error: no such profile") if argv[1] == "apply" else DummyCP(0)

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(AdapterFailure) as ei:
        OpenTofuClient().provision(tmp_path)
    assert ei.value.tool == "tofu"
    assert ei.value.returncode == 1
    assert "no such profile" in ei.value.stderr
    assert ei.value.argv[:2] == ["tofu", "apply"]


def test_missing_executable(monkeypatch, tmp_path: Path):
    def fake_run(argv, **kwargs):
        raise FileNotFoundError(argv[0])

    monkeypatch.setattr(subprocess, "run", fake_run)
    with pytest.raises(AdapterFailure) as ei:
        OpenTofuClient().init(tmp_path)
    assert "not found" in str(ei.value)


def test_destroy_inits_then_destroys_with_auto_approve(monkeypatch, tmp_path: Path):
    calls = []
    monkeypatch.setattr(subprocess, "run", lambda argv, **kw: calls.append(argv) or DummyCP(0))
    OpenTofuClient().destroy(tmp_path)
    assert calls == [
        ["tofu", "init", "-input=false"],
        ["tofu", "destroy", "-input=false", "-auto-approve"],
    ]


@pytest.mark.parametrize(
    "stdout",
    [
        "not json",
        json.dumps({}),
        json.dumps({"instance_info": {"value": {"name": "x"}}}),
        json.dumps({"instance_info": {"value": {"ip_address": "999.1.1.1"}}}),
    ],
)
def test_unusable_outputs_rejected(stdout):
    with pytest.raises(AdapterFailure):
        parse_instance_info(stdout)
