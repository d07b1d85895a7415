# db.py
from __future__ import annotations

import math
from typing import Optional, Tuple

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import NullPool

from . import settings
from .arguments import ArgumentMap
from .errors import ConnectError


def split_host(address: str) -> Tuple[str, Optional[int]]:
    """Split "host:port" into its parts; the port is optional."""
    host, sep, port = address.rpartition(":")
    if not sep:
        return address, None
    if not port.isdigit() or not 0 < int(port) <= 65535:
        raise ConnectError(
            message=f"invalid database address {address!r}",
            details={"hint": "expected host or host:port, port in 1..65535"},
        )
    return host, int(port)


def database_url(args: ArgumentMap) -> URL:
    """user:password@host:port/<db name>, built from the stage arguments."""
    host, port = split_host(args.get("MYAPP_HOST", ""))
    return URL.create(
        settings.DB_DRIVER,
        username=args.get("MYAPP_USER", ""),
        password=args.get("MYAPP_PASS", ""),
        host=host or None,
        port=port,
        database=settings.DB_NAME,
    )


def make_engine(url: URL | str, *, connect_timeout: Optional[float] = None) -> Engine:
    """
    One engine per stage call. NullPool: every connect() opens a new
    connection and close() really closes it.

    connect_timeout bounds the MySQL handshake in whole seconds (PyMySQL
    waits 10s by default). Other backends ignore it.
    """
    url = make_url(url)
    kwargs = {}
    if connect_timeout is not None and url.get_backend_name() == "mysql":
        kwargs["connect_args"] = {"connect_timeout": max(1, math.ceil(connect_timeout))}
    return create_engine(url, poolclass=NullPool, **kwargs)
