# readiness.py
from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from sqlalchemy import text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from . import settings
from .db import make_engine
from .errors import ReadinessTimeout, StageCanceled
from .ui.console import get_console


def ping(engine: Engine) -> bool:
    """Open a fresh connection, run SELECT 1, close it. True if that worked."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        get_console().print_debug(f"ping failed: {e.__class__.__name__}: {e}")
        return False


def url_probe(
    url: URL | str, *, connect_timeout: Optional[float] = None
) -> Callable[[], bool]:
    """Probe that builds (and disposes) its own engine on every attempt."""
    def probe() -> bool:
        engine = make_engine(url, connect_timeout=connect_timeout)
        try:
            return ping(engine)
        finally:
            engine.dispose()
    return probe


def wait_until_ready(
    probe: Callable[[], bool],
    *,
    timeout: float = settings.WAIT_TIMEOUT,
    interval: float = settings.WAIT_INTERVAL,
    cancel: Optional[threading.Event] = None,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """
    Call probe() until it returns True or `timeout` seconds have passed.

    The first probe runs immediately, then one every `interval` seconds.
    Sleeping happens on the cancel event, so setting it aborts the wait
    right away with StageCanceled.

    Returns:
        number of probe attempts it took
    Raises:
        ReadinessTimeout: deadline passed without a successful probe
        StageCanceled: cancel was set while waiting
    """
    if cancel is None:
        cancel = threading.Event()
    console = get_console()

    deadline = clock() + timeout
    attempts = 0
    while True:
        if clock() > deadline:
            raise ReadinessTimeout(
                message=f"data store not ready after {timeout:g}s",
                details={"attempts": attempts},
            )

        attempts += 1
        if probe():
            console.print_info(f"data store ready (attempt {attempts})")
            return attempts
        console.print_debug(f"attempt {attempts}: not ready, retrying in {interval:g}s")

        if cancel.wait(interval):
            raise StageCanceled(
                message="readiness wait canceled",
                details={"attempts": attempts},
            )
