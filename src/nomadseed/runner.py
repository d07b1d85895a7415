# runner.py
from __future__ import annotations

import threading
from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .arguments import ArgumentLike
from .errors import StageCanceled, StageError
from .model import Stage
from .ui.console import get_console


# ----------------------------------------------------------------------
# DAG build (dependency graph)
# ----------------------------------------------------------------------

def _build_graph(stages: List[Stage]) -> Tuple[Dict[str, Stage], Dict[str, Set[str]], Dict[str, int]]:
    by_title: Dict[str, Stage] = {}
    for s in stages:
        if s.title in by_title:
            raise ValueError(f"Duplicate stage title: {s.title}")
        by_title[s.title] = s

    adj: Dict[str, Set[str]] = {title: set() for title in by_title}   # dep -> dependents
    indeg: Dict[str, int] = {title: 0 for title in by_title}

    for s in stages:
        for d in s.needs:
            if d not in by_title:
                raise ValueError(
                    f"Stage '{s.title}' needs missing stage '{d}'. "
                    f"Known stages: {sorted(by_title)}"
                )
            if s.title not in adj[d]:
                adj[d].add(s.title)
                indeg[s.title] += 1

    return by_title, adj, indeg


def _topo_order(
    stages: List[Stage], adj: Dict[str, Set[str]], indeg: Dict[str, int]
) -> List[str]:
    indeg = dict(indeg)
    position = {s.title: i for i, s in enumerate(stages)}

    q = deque(s.title for s in stages if indeg[s.title] == 0)
    order: List[str] = []
    while q:
        title = q.popleft()
        order.append(title)
        for child in sorted(adj[title], key=position.__getitem__):
            indeg[child] -= 1
            if indeg[child] == 0:
                q.append(child)

    if len(order) != len(stages):
        remaining = sorted(t for t, d in indeg.items() if d > 0)
        raise ValueError(f"Pipeline has a cycle. Stuck stages: {remaining}")
    return order


def execution_order(stages: Sequence[Stage]) -> List[str]:
    """
    Topological order of stage titles. Ties keep declaration order.

    Raises ValueError on duplicates, unknown dependencies or cycles.
    """
    stages = list(stages)
    _by_title, adj, indeg = _build_graph(stages)
    return _topo_order(stages, adj, indeg)


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def run_pipeline(
    stages: Iterable[Stage],
    arguments: Sequence[ArgumentLike],
    *,
    cancel: Optional[threading.Event] = None,
) -> Dict[str, str]:
    """
    Run stages one at a time in dependency order.

    Each handler gets the full argument list. A stage runs only if all of
    its dependencies finished "ok"; otherwise it is "skipped". Once the
    cancel event is set, stages not yet started are "canceled".

    Returns:
        title -> "ok" | "failed" | "skipped" | "canceled", in execution order
    """
    stages = list(stages)
    by_title, adj, indeg = _build_graph(stages)
    order = _topo_order(stages, adj, indeg)
    console = get_console()
    if cancel is None:
        cancel = threading.Event()

    results: Dict[str, str] = {}
    for title in order:
        s = by_title[title]

        if cancel.is_set():
            results[title] = "canceled"
            console.print_stage_skipped(title, "canceled")
            continue

        blocked = [d for d in s.needs if results.get(d) != "ok"]
        if blocked:
            results[title] = "skipped"
            console.print_stage_skipped(title, f"dependency not ok: {', '.join(blocked)}")
            continue

        console.print_stage_start(title)
        try:
            s.handler(list(arguments), cancel=cancel)
        except StageCanceled as e:
            results[title] = "canceled"
            console.print_failure(title, str(e))
        except Exception as e:
            results[title] = "failed"
            hint = e.details.get("hint") if isinstance(e, StageError) else None
            console.print_failure(title, str(e), hint=hint)
            if console.debug:
                console.print_exception(e)
        else:
            results[title] = "ok"
            console.print_success(title)

    return results
