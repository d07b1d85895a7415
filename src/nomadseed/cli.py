# cli.py
from __future__ import annotations

import json
import os
import signal
import sys
import threading
from typing import List

import click

from nomadseed import settings
from nomadseed.arguments import parse_assignment, resolve_arguments
from nomadseed.jobspec import build_job_spec, job_to_dict
from nomadseed.model import Argument
from nomadseed.nomad import resolve_api_address
from nomadseed.pipeline import ARGUMENTS, OPTIONAL_ARGUMENTS, build_pipeline, variant_name
from nomadseed.runner import execution_order, run_pipeline
from nomadseed.ui.console import Console, set_console, get_console


def collect_arguments(assignments: tuple[str, ...]) -> List[Argument]:
    """
    Build the stage argument list.

    Declared keys found in the environment come first, then every --arg
    KEY=VALUE in order, so the command line wins over the environment.
    """
    args: List[Argument] = []
    for declared in ARGUMENTS + OPTIONAL_ARGUMENTS:
        if declared.key in os.environ:
            args.append(Argument(
                key=declared.key,
                value=os.environ[declared.key],
                type=declared.type,
                description=declared.description,
            ))

    for text in assignments:
        try:
            args.append(parse_assignment(text))
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--arg") from e
    return args


def _install_signal_handlers(cancel: threading.Event) -> dict:
    """Route SIGINT/SIGTERM to the cancel event. Returns the previous handlers."""
    def handler(signum, frame):
        get_console().print_info(f"\nReceived signal {signum}, canceling pipeline...")
        cancel.set()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous[sig] = signal.signal(sig, handler)
    return previous


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
def cli(debug):
    """nomadseed: deploy myapp to Nomad, wait for its database, seed it."""
    console = Console(debug=debug)
    set_console(console)


_arg_option = click.option(
    "--arg", "-a", "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    help="Stage argument (MYAPP_HOST, MYAPP_USER, MYAPP_PASS, NOMAD_API, NOMAD_TOKEN). Repeatable.",
)
_wait_option = click.option(
    "--wait/--no-wait",
    default=True,
    show_default=True,
    help="Wait for the database between deploy and import",
)
_host_option = click.option(
    "--use-resolved-host",
    is_flag=True,
    default=False,
    help="Give the frontend MYAPP_HOST instead of host.docker.internal:3306",
)


@cli.command()
@_arg_option
@_wait_option
@_host_option
@click.option("--timeout", default=settings.WAIT_TIMEOUT, type=float, show_default=True,
              help="Seconds to wait for the database")
@click.option("--interval", default=settings.WAIT_INTERVAL, type=float, show_default=True,
              help="Seconds between readiness probes")
def run(assignments, wait, use_resolved_host, timeout, interval):
    """Run the deploy/seed pipeline."""
    console = get_console()
    args = collect_arguments(assignments)

    stages = build_pipeline(
        wait=wait,
        use_resolved_host=use_resolved_host,
        timeout=timeout,
        interval=interval,
    )

    cancel = threading.Event()
    previous_handlers = _install_signal_handlers(cancel)

    try:
        resolved = resolve_arguments(args)
        console.print_run_started(
            pipeline=variant_name(wait),
            stage_count=len(stages),
            orchestrator=resolve_api_address(resolved.get("NOMAD_API")),
        )

        results = run_pipeline(stages, args, cancel=cancel)
        console.print_results(results)

        if any(v == "canceled" for v in results.values()):
            sys.exit(130)
        if any(v != "ok" for v in results.values()):
            sys.exit(1)

    except Exception as e:
        console.print_exception(e)
        sys.exit(1)
    finally:
        for sig, previous in previous_handlers.items():
            signal.signal(sig, previous)


@cli.command("stages")
@_wait_option
def list_stages(wait):
    """Print the stages of a pipeline variant in execution order."""
    console = get_console()
    stages = {s.title: s for s in build_pipeline(wait=wait)}

    console.print_header(f"Pipeline: {variant_name(wait)}")
    for title in execution_order(list(stages.values())):
        console.print_plan_stage(title, stages[title].needs)


@cli.command("render-job")
@_arg_option
@_host_option
def render_job(assignments, use_resolved_host):
    """Print the Nomad job document as JSON without submitting it."""
    args = resolve_arguments(collect_arguments(assignments))
    spec = build_job_spec(args, use_resolved_host=use_resolved_host)
    click.echo(json.dumps({"Job": job_to_dict(spec)}, indent=2))


if __name__ == "__main__":
    cli()
