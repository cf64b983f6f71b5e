"""
Global progress reporting for the Agri Assist CLI.

This module provides a centralized progress reporter that shows a spinner with
the current step and prints a checkmark for each completed step.
"""

from typing import List, Optional

from rich.console import Console
from rich.status import Status


class ProgressReporter:
    """
    Global progress reporter for status updates with step completion tracking.
    """

    def __init__(self):
        self._status: Optional[Status] = None
        self._console: Optional[Console] = None
        self._completed_steps: List[str] = []
        self._current_step: Optional[str] = None

    def initialize(self, console: Console, initial_message: str = "Starting...") -> Status:
        """
        Initialize the reporter with a console and create a status object.

        Returns:
            Status object that should be used in a context manager
        """
        self._console = console
        self._status = console.status(f"[dim]{initial_message}[/dim]")
        self._completed_steps = []
        self._current_step = initial_message
        return self._status

    def step(self, message: str) -> None:
        """Mark the previous step as completed and show a new one."""
        if self._status is None:
            return
        if self._current_step is not None:
            self._completed_steps.append(self._current_step)
            if self._console is not None:
                self._console.print(f"[green]✓[/green] [dim]{self._current_step}[/dim]")

        self._current_step = message
        self._status.update(f"[dim]{message}[/dim]")

    def complete_step(self, message: Optional[str] = None) -> None:
        """Mark the current step as completed without starting a new one."""
        if self._current_step is not None:
            completion_msg = message or self._current_step
            self._completed_steps.append(completion_msg)
            if self._console is not None:
                self._console.print(f"[green]✓[/green] [dim]{completion_msg}[/dim]")
            self._current_step = None


# Global reporter instance
reporter = ProgressReporter()
