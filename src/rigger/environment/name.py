# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/environment/name.py
from __future__ import annotations

import re

from ..errors import ConfigError

_VALID = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")

VALID_EXAMPLES = ("dev", "staging", "e2e-full", "test-integration")


class InvalidEnvironmentName(ConfigError, ValueError):
    """Also a ValueError so record decoding can treat it like any bad field."""


def validate_name(name: str) -> str:
    """
    Environment names are used as directory names and instance names, so they
    are restricted to lowercase letters, digits and single dashes, starting
    with a letter.
    """
    if not name:
        raise InvalidEnvironmentName("environment name must not be empty")

    if _VALID.match(name):
        return name

    if name[0].isdigit():
        reason = "starts with a number"
    elif name.lower() != name:
        reason = "contains uppercase letters"
    elif name.startswith("-") or name.endswith("-"):
        reason = "starts or ends with a dash"
    elif "--" in name:
        reason = "contains consecutive dashes"
    else:
        reason = "contains characters other than a-z, 0-9 and '-'"

    raise InvalidEnvironmentName(
        f"invalid environment name '{name}': {reason} "
        f"(examples: {', '.join(VALID_EXAMPLES)})"
    )
