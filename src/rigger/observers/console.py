# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/observers/console.py
import typer

from .events import BaseEvent, CommandStarted, StepFailed, StepStarted, StepSucceeded


class ConsoleObserver:
    """Prints one progress line per step."""

    def notify(self, event: BaseEvent) -> None:
        if isinstance(event, CommandStarted):
            typer.echo(f"[{event.command}] {event.env} ({event.phase}): {' -> '.join(event.steps) or 'no steps'}")
        elif isinstance(event, StepStarted):
            typer.echo(f"[{event.command}] {event.step} ...")
        elif isinstance(event, StepSucceeded):
            typer.echo(f"[{event.command}] {event.step} done ({event.duration_ms} ms)")
        elif isinstance(event, StepFailed):
            typer.echo(f"[{event.command}] {event.step} FAILED: {event.kind}", err=True)
