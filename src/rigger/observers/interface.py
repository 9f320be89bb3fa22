# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/observers/interface.py
from __future__ import annotations

from typing import Protocol, runtime_checkable

from .events import BaseEvent


@runtime_checkable
class Observer(Protocol):
    """
    Receives every event emitted on an EventBus, in emission order.
    `notify` runs inline with the command, so it should be quick; whatever
    it raises is logged and dropped by the bus.
    """

    def notify(self, event: BaseEvent) -> None: ...
