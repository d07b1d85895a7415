"""Console output formatting utilities for nomadseed."""

from __future__ import annotations

import sys
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_run_started(self, pipeline: str, stage_count: int, orchestrator: str) -> None:
        """Print run start information."""
        print("\nRUN STARTED")
        print(f"Pipeline: {pipeline}")
        print(f"Orchestrator: {orchestrator}")
        print(f"Stages: {stage_count}")
        print()

    def print_stage_start(self, title: str) -> None:
        print(f"\nSTAGE STARTED: {title}")

    def print_success(self, title: str) -> None:
        print("STATUS: success")

    def print_failure(self, title: str, reason: str, hint: Optional[str] = None) -> None:
        """
        Print stage failure message.

        Args:
            title: Stage title
            reason: Failure reason/error message
            hint: Optional hint for user
        """
        print(f"STAGE FAILED: {title}")
        if hint:
            print(f"Hint: {hint}")
        if self.debug:
            print(f"Error details: {reason}")
        else:
            # First line only outside debug mode
            error_line = reason.split("\n")[0] if reason else "Unknown error"
            print(f"Error: {error_line}")

    def print_stage_skipped(self, title: str, reason: str) -> None:
        print(f"\nSTAGE STARTED: {title}")
        print(f"STATUS: skipped ({reason})")

    def print_plan_stage(self, title: str, needs: list[str]) -> None:
        """Print one line of the execution plan."""
        if needs:
            print(f"  {title} (needs: {', '.join(needs)})")
        else:
            print(f"  {title}")

    def print_results(self, results: dict[str, str]) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for title, status in results.items():
            status_display = status.upper() if status != "ok" else "SUCCESS"
            print(f"  {title}: {status_display}")

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
