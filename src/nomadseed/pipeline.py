# pipeline.py
from __future__ import annotations

from functools import partial
from typing import List, Optional

from . import settings
from .model import Argument, ArgumentType, Stage, StageHandler
from .stages import (
    DEPLOY_APPLICATION,
    IMPORT_TEST_DATA,
    WAIT_FOR_DB,
    deploy_application,
    import_test_data,
    wait_for_db,
)


# ---------------------------------------------------------------------
# Declared arguments (what the host asks the user for)
# ---------------------------------------------------------------------

ARGUMENTS: List[Argument] = [
    Argument(key="MYAPP_HOST", type=ArgumentType.VAULT, description="myapp db host"),
    Argument(key="MYAPP_USER", type=ArgumentType.VAULT, description="myapp db user"),
    Argument(key="MYAPP_PASS", type=ArgumentType.VAULT, description="myapp db password"),
    Argument(key="NOMAD_API", type=ArgumentType.TEXTFIELD, description="Nomad API address:"),
]

OPTIONAL_ARGUMENTS: List[Argument] = [
    Argument(key="NOMAD_TOKEN", type=ArgumentType.VAULT, description="Nomad ACL token"),
]


# ---------------------------------------------------------------------
# Stage helper
# ---------------------------------------------------------------------

def stage(
    title: str,
    handler: StageHandler,
    *,
    description: str = "",
    needs: Optional[List[str]] = None,
    args: Optional[List[Argument]] = None,
) -> Stage:
    """Create a stage; args default to the declared plugin arguments."""
    return Stage(
        title=title,
        handler=handler,
        description=description,
        args=list(ARGUMENTS if args is None else args),
        needs=list(needs or []),
    )


# ---------------------------------------------------------------------
# Pipeline variants
# ---------------------------------------------------------------------

def build_pipeline(
    *,
    wait: bool = True,
    use_resolved_host: bool = False,
    timeout: float = settings.WAIT_TIMEOUT,
    interval: float = settings.WAIT_INTERVAL,
) -> List[Stage]:
    """
    The deploy -> (wait ->) import chain.

    With wait=False the import stage depends on the deploy stage directly
    and relies on the database already being reachable.
    """
    stages = [
        stage(
            DEPLOY_APPLICATION,
            partial(deploy_application, use_resolved_host=use_resolved_host),
            description="deploy the application with database",
        ),
    ]

    seed_needs = [DEPLOY_APPLICATION]
    if wait:
        stages.append(
            stage(
                WAIT_FOR_DB,
                partial(wait_for_db, timeout=timeout, interval=interval),
                description="wait for database to come up",
                needs=[DEPLOY_APPLICATION],
            )
        )
        seed_needs = [WAIT_FOR_DB]

    stages.append(
        stage(
            IMPORT_TEST_DATA,
            import_test_data,
            description="import test data into application database",
            needs=seed_needs,
        )
    )
    return stages


def variant_name(wait: bool) -> str:
    return "deploy-wait-seed" if wait else "deploy-seed"
