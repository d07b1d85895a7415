# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Sequence


class ArgumentType(str, Enum):
    """Input kind the host renders for an argument."""
    VAULT = "vault"
    TEXTFIELD = "textfield"


@dataclass(frozen=True)
class Argument:
    """A single named string argument handed to a stage."""
    key: str
    value: str = ""
    type: ArgumentType = ArgumentType.TEXTFIELD
    description: str = ""


# handler(arguments, cancel=Event | None) -> None; raises on failure
StageHandler = Callable[..., None]


@dataclass
class Stage:
    """
    A pipeline stage: handler + dependencies + declared arguments.

    `needs` lists the titles of stages that must succeed BEFORE this one.
    """
    title: str
    handler: StageHandler
    description: str = ""
    args: List[Argument] = field(default_factory=list)
    needs: List[str] = field(default_factory=list)

    def argument_keys(self) -> Sequence[str]:
        return [a.key for a in self.args]

