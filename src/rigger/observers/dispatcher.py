# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/observers/dispatcher.py
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .events import BaseEvent
from .interface import Observer

log = logging.getLogger("rigger")


class EventBus:
    def __init__(self, observers: Optional[Iterable[Observer]] = None):
        self._observers: List[Observer] = []
        for ob in observers or ():
            self.subscribe(ob)

    def subscribe(self, observer: Observer) -> None:
        if not isinstance(observer, Observer):
            raise TypeError(f"{type(observer).__name__} has no notify(event) method")
        self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def emit(self, event: BaseEvent) -> None:
        for ob in list(self._observers):
            try:
                ob.notify(event)
            except Exception as exc:  # observers must not break commands
                log.debug("observer %s failed on %s: %s", type(ob).__name__, type(event).__name__, exc)
