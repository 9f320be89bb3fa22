# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from .store import EnvironmentStore, ListedEnvironment, from_record, to_record

__all__ = ["EnvironmentStore", "ListedEnvironment", "from_record", "to_record"]
