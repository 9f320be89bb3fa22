# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from .base import Command, CommandContext, StepOutcome
from .configure import ConfigureCommand
from .create import CreateCommand
from .destroy import DestroyCommand
from .provision import ProvisionCommand
from .purge import PurgeCommand
from .queries import list_environments, show_environment
from .register import RegisterCommand
from .release import ReleaseCommand
from .render import RenderCommand
from .run import RunCommand
from .validate import ValidateCommand

COMMANDS = {
    "provision": ProvisionCommand,
    "configure": ConfigureCommand,
    "release": ReleaseCommand,
    "run": RunCommand,
    "destroy": DestroyCommand,
}

__all__ = [
    "COMMANDS",
    "Command",
    "CommandContext",
    "ConfigureCommand",
    "CreateCommand",
    "DestroyCommand",
    "ProvisionCommand",
    "PurgeCommand",
    "RegisterCommand",
    "ReleaseCommand",
    "RenderCommand",
    "RunCommand",
    "StepOutcome",
    "ValidateCommand",
    "list_environments",
    "show_environment",
]
