# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/rendering/tofu.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from ..environment.aggregate import Environment
from ..errors import ConfigError
from .renderer import TemplateRenderer, write_file

log = logging.getLogger("rigger")


def _read_public_key(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ConfigError(f"cannot read SSH public key {path}: {exc}") from exc


def render_tofu_project(env: Environment, out_dir: Path, renderer: TemplateRenderer) -> List[Path]:
    """
    Render the OpenTofu working directory for the environment's provider.
    Existing files are overwritten; `.terraform` and state files are left
    alone so a re-run reuses them.
    """
    inputs = env.user_inputs
    provider = inputs.provider
    public_key = _read_public_key(inputs.ssh.public_key_path)

    written: List[Path] = [
        renderer.render_to(
            "tofu/cloud-init.yml.j2",
            {
                "username": inputs.ssh.username,
                "public_key": public_key,
                "ssh_port": inputs.ssh.port,
            },
            out_dir / "cloud-init.yml",
        )
    ]

    if provider.kind == "lxd":
        written.append(
            renderer.render_to(
                "tofu/lxd/main.tf.j2",
                {
                    "instance_name": env.instance_name,
                    "profile_name": provider.profile_name or f"{env.instance_name}-profile",
                    "image_version": provider.settings.get("image_version", "24.04"),
                },
                out_dir / "main.tf",
            )
        )
    else:
        written.append(
            renderer.render_to(
                "tofu/hetzner/main.tf.j2",
                {
                    "instance_name": env.instance_name,
                    "server_type": provider.server_type,
                    "location": provider.location,
                    "image": provider.image,
                },
                out_dir / "main.tf",
            )
        )
        written.append(
            renderer.render_to(
                "tofu/hetzner/terraform.tfvars.j2",
                {"api_token": provider.api_token},
                out_dir / "terraform.tfvars",
            )
        )
        written.append(write_file(out_dir / "id.pub", public_key + "\n"))

    log.info("rendered OpenTofu project (%s) into %s", provider.kind, out_dir)
    return written
