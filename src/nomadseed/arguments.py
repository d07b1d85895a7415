# arguments.py
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Tuple, Union

from .errors import MissingRequiredKey
from .model import Argument

ArgumentMap = Mapping[str, str]

ArgumentLike = Union[Argument, Tuple[str, str]]


def _pair(arg: ArgumentLike) -> Tuple[str, str]:
    if isinstance(arg, Argument):
        return arg.key, arg.value
    key, value = arg
    return key, value


def resolve_arguments(
    arguments: Iterable[ArgumentLike],
    required: Iterable[str] = (),
    *,
    stage: str | None = None,
) -> ArgumentMap:
    """
    Collapse an ordered argument list into a read-only key -> value map.

    Keys are case-sensitive; a repeated key keeps the last value seen.
    When `required` is given, every key in it must be present (an empty
    value counts as present), otherwise MissingRequiredKey lists all of
    the absent keys.
    """
    resolved: dict[str, str] = {}
    for arg in arguments:
        key, value = _pair(arg)
        resolved[key] = value

    missing = tuple(sorted(k for k in set(required) if k not in resolved))
    if missing:
        raise MissingRequiredKey(
            message=f"missing required argument(s): {', '.join(missing)}",
            stage=stage,
            missing=missing,
        )

    return MappingProxyType(resolved)


def parse_assignment(text: str) -> Argument:
    """Parse a KEY=VALUE string (as given on the command line)."""
    key, sep, value = text.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValueError(f"expected KEY=VALUE, got {text!r}")
    return Argument(key=key, value=value)
