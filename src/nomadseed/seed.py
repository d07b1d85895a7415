# seed.py
from __future__ import annotations

from typing import Sequence

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from .errors import ConnectError, QueryError
from .ui.console import get_console

TABLE = "names"

FIXTURE_NAMES: tuple[str, ...] = (
    "Friedrich",
    "Hans",
    "Anna",
    "Bertha",
    "Heinrich",
    "Hermann",
    "Maria",
    "Martha",
    "Otto",
    "Walter",
    "Sieglinde",
    "Emma",
)

DROP_TABLE = text(f"DROP TABLE IF EXISTS {TABLE}")
CREATE_TABLE = text(f"CREATE TABLE {TABLE} (name VARCHAR(20))")
INSERT_ROW = text(f"INSERT INTO {TABLE} VALUES (:name)")


def _query_error(step: str, e: SQLAlchemyError) -> QueryError:
    return QueryError(
        message=f"failed to {step}",
        details={"table": TABLE, "cause": str(getattr(e, "orig", None) or e)},
    )


def seed_names(engine: Engine, names: Sequence[str] = FIXTURE_NAMES) -> int:
    """
    Reset the fixture table and fill it with `names`, in order.

    Runs over a single autocommit connection: drop, create, then one
    insert per row through the same compiled statement. The first failing
    statement stops the seed; nothing is rolled back, the next full run
    starts from the drop again.

    Returns:
        number of rows inserted
    """
    console = get_console()

    try:
        conn = engine.connect().execution_options(isolation_level="AUTOCOMMIT")
    except DBAPIError as e:
        raise ConnectError(
            message="failed to connect to database",
            details={"cause": str(e.orig)},
        ) from e

    with conn:
        try:
            conn.execute(DROP_TABLE)
        except SQLAlchemyError as e:
            raise _query_error("drop table", e) from e

        try:
            conn.execute(CREATE_TABLE)
        except SQLAlchemyError as e:
            raise _query_error("create table", e) from e

        inserted = 0
        for name in names:
            try:
                conn.execute(INSERT_ROW, {"name": name})
            except SQLAlchemyError as e:
                err = _query_error("insert test data", e)
                err.details["row"] = name
                raise err from e
            inserted += 1

    console.print_info(f"seeded {inserted} row(s) into '{TABLE}'")
    return inserted
