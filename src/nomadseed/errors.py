# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass(eq=False)
class StageError(Exception):
    """
    Structured stage error with enough context for:
      - clean CLI output
      - the runner's per-stage results
      - debugging without full tracebacks
    """
    message: str
    stage: str | None = None
    details: dict = field(default_factory=dict)

    kind: ClassVar[str] = "stage_error"

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.stage:
            lines.append(f"stage={self.stage}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class ConnectError(StageError):
    """The orchestrator or the data store could not be reached."""
    kind = "connection_error"


class SubmissionError(StageError):
    """The orchestrator rejected the job document."""
    kind = "submission_error"


class ReadinessTimeout(StageError):
    """The data store did not answer a probe before the deadline."""
    kind = "timeout"


class QueryError(StageError):
    """A SQL statement failed on an established connection."""
    kind = "query_error"


class StageCanceled(StageError):
    kind = "canceled"


@dataclass(eq=False)
class MissingRequiredKey(StageError):
    missing: tuple[str, ...] = ()

    kind: ClassVar[str] = "missing_required_key"
