# stages.py
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from . import settings
from .arguments import ArgumentLike, resolve_arguments
from .db import database_url, make_engine
from .errors import StageCanceled, StageError
from .jobspec import build_job_spec
from .nomad import NomadClient, resolve_api_address
from .readiness import url_probe, wait_until_ready
from .seed import seed_names
from .ui.console import get_console

DEPLOY_APPLICATION = "Deploy Application"
WAIT_FOR_DB = "Wait for DB"
IMPORT_TEST_DATA = "Import test data"

DB_KEYS = ("MYAPP_HOST", "MYAPP_USER", "MYAPP_PASS")


@contextmanager
def _stage(title: str, cancel: Optional[threading.Event]) -> Iterator[None]:
    """Tag StageErrors raised inside with the stage title."""
    try:
        if cancel is not None and cancel.is_set():
            raise StageCanceled(message="canceled before start")
        yield
    except StageError as e:
        if e.stage is None:
            e.stage = title
        raise


def deploy_application(
    arguments: Iterable[ArgumentLike],
    *,
    use_resolved_host: bool = False,
    cancel: Optional[threading.Event] = None,
) -> None:
    """Build the myapp job and register it with Nomad."""
    required = DB_KEYS if use_resolved_host else ("MYAPP_USER", "MYAPP_PASS")

    with _stage(DEPLOY_APPLICATION, cancel):
        args = resolve_arguments(arguments, required)
        spec = build_job_spec(args, use_resolved_host=use_resolved_host)
        client = NomadClient(
            resolve_api_address(args.get("NOMAD_API")),
            token=args.get("NOMAD_TOKEN"),
        )
        result = client.register_job(spec)

    get_console().print_info(
        f"registered job '{spec.id}' at {client.address} "
        f"(eval={result.eval_id or '-'}, modify_index={result.job_modify_index})"
    )


def wait_for_db(
    arguments: Iterable[ArgumentLike],
    *,
    timeout: float = settings.WAIT_TIMEOUT,
    interval: float = settings.WAIT_INTERVAL,
    cancel: Optional[threading.Event] = None,
) -> None:
    """Block until the database answers a ping, or give up after `timeout`."""
    with _stage(WAIT_FOR_DB, cancel):
        args = resolve_arguments(arguments, DB_KEYS)
        get_console().print_info(
            f"waiting for database at {args['MYAPP_HOST']} (timeout {timeout:g}s)"
        )
        wait_until_ready(
            url_probe(database_url(args), connect_timeout=interval),
            timeout=timeout,
            interval=interval,
            cancel=cancel,
        )


def import_test_data(
    arguments: Iterable[ArgumentLike],
    *,
    cancel: Optional[threading.Event] = None,
) -> None:
    """Drop, recreate and fill the names table."""
    with _stage(IMPORT_TEST_DATA, cancel):
        args = resolve_arguments(arguments, DB_KEYS)
        engine = make_engine(database_url(args))
        try:
            seed_names(engine)
        finally:
            engine.dispose()
