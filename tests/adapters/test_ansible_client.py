import types
from pathlib import Path

import pytest

import rigger.adapters.ansible as ansible_mod
from rigger.adapters.ansible import AnsibleClient, to_ansible_inventory
from rigger.adapters.interface import Inventory
from rigger.errors import AdapterFailure


def _inventory(tmp_path):
    return Inventory(host="rigger-dev", address="10.0.0.5", username="torrust",
                     port=22, private_key_path=tmp_path / "id")


def _project(tmp_path, names):
    for n in names:
        (tmp_path / n).write_text("- hosts: all\n")
    return tmp_path


def test_inventory_shape(tmp_path: Path):
    inv = to_ansible_inventory(_inventory(tmp_path))
    host = inv["all"]["hosts"]["rigger-dev"]
    assert host["ansible_host"] == "10.0.0.5"
    assert host["ansible_user"] == "torrust"
    assert host["ansible_ssh_private_key_file"] == str(tmp_path / "id")


def test_playbooks_run_in_order(monkeypatch, tmp_path: Path):
    seen = []

    def fake_run(**kwargs):
        seen.append(Path(kwargs["playbook"]).name)
        assert kwargs["private_data_dir"] == str(tmp_path)
        assert kwargs["envvars"]["ANSIBLE_HOST_KEY_CHECKING"] == "False"
        return types.SimpleNamespace(rc=0, status="successful")

    monkeypatch.setattr(ansible_mod.ansible_runner, "run", fake_run)

    books = ["a.yml", "b.yml"]
    AnsibleClient().configure(_project(tmp_path, books), _inventory(tmp_path), books)
    assert seen == books


def test_first_failure_stops_the_run(monkeypatch, tmp_path: Path):
    seen = []

    def fake_run(**kwargs):
        seen.append(Path(kwargs["playbook"]).name)
        return types.SimpleNamespace(rc=2, status="failed", stdout=None)

    monkeypatch.setattr(ansible_mod.ansible_runner, "run", fake_run)

    books = ["a.yml", "b.yml"]
    with pytest.raises(AdapterFailure) as ei:
        AnsibleClient().configure(_project(tmp_path, books), _inventory(tmp_path), books)
    assert seen == ["a.yml"]
    assert ei.value.returncode == 2


def test_missing_playbook(tmp_path: Path):
    with pytest.raises(AdapterFailure):
        AnsibleClient().run_playbook(tmp_path, _inventory(tmp_path), "nope.yml")
