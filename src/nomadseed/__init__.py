from .arguments import resolve_arguments
from .jobspec import JobSpec, build_job_spec, job_to_dict
from .model import Argument, Stage
from .nomad import NomadClient, resolve_api_address
from .pipeline import build_pipeline
from .readiness import wait_until_ready
from .runner import run_pipeline
from .seed import FIXTURE_NAMES, seed_names

__all__ = [
    "resolve_arguments",
    "JobSpec", "build_job_spec", "job_to_dict",
    "Argument", "Stage",
    "NomadClient", "resolve_api_address",
    "build_pipeline", "run_pipeline",
    "wait_until_ready", "FIXTURE_NAMES", "seed_names",
]
