# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/rendering/renderer.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from ..errors import ConfigError, PersistenceFailure

log = logging.getLogger("rigger")

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def make_dirs(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PersistenceFailure(f"cannot create directory {path}: {exc}") from exc
    return path


def write_file(dest: Path, content: str) -> Path:
    make_dirs(dest.parent)
    try:
        dest.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise PersistenceFailure(f"cannot write {dest}: {exc}") from exc
    return dest


class TemplateRenderer:
    def __init__(self, templates_dir: Optional[Path] = None):
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template_name: str, context: dict) -> str:
        try:
            tmpl = self.env.get_template(template_name)
            return tmpl.render(**context)
        except TemplateError as exc:
            raise ConfigError(f"cannot render template {template_name}: {exc}") from exc

    def render_to(self, template_name: str, context: dict, dest: Path) -> Path:
        write_file(dest, self.render(template_name, context))
        log.debug("rendered %s -> %s", template_name, dest)
        return dest
