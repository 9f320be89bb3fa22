# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from .aggregate import Environment, RuntimeOutputs
from .name import InvalidEnvironmentName, validate_name
from .state import Phase

__all__ = [
    "Environment",
    "InvalidEnvironmentName",
    "Phase",
    "RuntimeOutputs",
    "validate_name",
]
