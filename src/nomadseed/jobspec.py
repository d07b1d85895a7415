# jobspec.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .arguments import ArgumentMap
from . import settings

# ---------------------------------------------------------------------
# Static workload description
# ---------------------------------------------------------------------

JOB_ID = "myapp"
JOB_REGION = "eu"
JOB_PRIORITY = 50
JOB_DATACENTERS = ("dc1",)

TASK_GROUP = "myAppTaskGroup"
REPLICA_COUNT = 1

FRONTEND_IMAGE = "michelvocks/myapp"
DB_IMAGE = "mysql:latest"
DB_MEMORY_MB = 800

# frontend containers reach the database through the docker host by default
INTERNAL_DB_HOST = "host.docker.internal:3306"

DRIVER_DOCKER = "docker"


# ---------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class ServiceRegistration:
    """A discoverable service name bound to a named port."""
    name: str
    port_label: str


@dataclass(frozen=True)
class PortReservation:
    label: str
    value: int

    def __post_init__(self) -> None:
        if not 0 < self.value <= 65535:
            raise ValueError(f"port {self.label!r} out of range: {self.value}")


@dataclass
class Task:
    name: str
    image: str
    driver: str = DRIVER_DOCKER
    env: Dict[str, str] = field(default_factory=dict)
    services: List[ServiceRegistration] = field(default_factory=list)
    reserved_ports: List[PortReservation] = field(default_factory=list)
    memory_limit_mb: Optional[int] = None

    def __post_init__(self) -> None:
        labels = [p.label for p in self.reserved_ports]
        if len(set(labels)) != len(labels):
            dupes = sorted({lb for lb in labels if labels.count(lb) > 1})
            raise ValueError(f"Task '{self.name}' reserves duplicate port labels: {dupes}")

        service_labels = {s.port_label for s in self.services}
        for label in labels:
            if label not in service_labels:
                raise ValueError(
                    f"Task '{self.name}' reserves port '{label}' but no service uses it. "
                    f"Service port labels: {sorted(service_labels)}"
                )


@dataclass
class TaskGroup:
    name: str
    replica_count: int
    tasks: List[Task] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.replica_count < 1:
            raise ValueError(f"TaskGroup '{self.name}' needs replica_count >= 1, got {self.replica_count}")


@dataclass
class JobSpec:
    """Declarative description of the workload submitted to Nomad."""
    id: str
    name: str
    region: str
    priority: int
    datacenters: List[str] = field(default_factory=list)
    task_groups: List[TaskGroup] = field(default_factory=list)
    type: str = "service"

    def tasks(self) -> List[Task]:
        return [t for g in self.task_groups for t in g.tasks]


# ---------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------

def build_job_spec(args: ArgumentMap, *, use_resolved_host: bool = False) -> JobSpec:
    """
    Build the myapp job: one task group holding the frontend and db tasks.

    Args:
        args: resolved stage arguments (MYAPP_HOST, MYAPP_USER, MYAPP_PASS)
        use_resolved_host: inject MYAPP_HOST into the frontend instead of
            the internal docker host alias

    Returns:
        JobSpec ready for NomadClient.register_job()
    """
    db_host = args.get("MYAPP_HOST", "") if use_resolved_host else INTERNAL_DB_HOST

    frontend = Task(
        name="myapp",
        image=f"{FRONTEND_IMAGE}:latest",
        env={
            "MYAPP_DB_HOST": db_host,
            "MYAPP_DB_USERNAME": args.get("MYAPP_USER", ""),
            "MYAPP_DB_PASSWORD": args.get("MYAPP_PASS", ""),
        },
        services=[ServiceRegistration(name="myapp-frontend", port_label="frontend")],
        reserved_ports=[PortReservation(label="frontend", value=9090)],
    )

    db = Task(
        name="db",
        image=DB_IMAGE,
        env={
            "MYSQL_ROOT_PASSWORD": args.get("MYAPP_PASS", ""),
            "MYSQL_DATABASE": settings.DB_NAME,
        },
        services=[ServiceRegistration(name="db-backend", port_label="backend")],
        reserved_ports=[PortReservation(label="backend", value=3306)],
        memory_limit_mb=DB_MEMORY_MB,
    )

    return JobSpec(
        id=JOB_ID,
        name=JOB_ID,
        region=JOB_REGION,
        priority=JOB_PRIORITY,
        datacenters=list(JOB_DATACENTERS),
        task_groups=[TaskGroup(name=TASK_GROUP, replica_count=REPLICA_COUNT, tasks=[frontend, db])],
    )


# ---------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------

def _task_to_dict(task: Task) -> Dict[str, Any]:
    resources: Dict[str, Any] = {
        "Networks": [
            {
                "ReservedPorts": [
                    {"Label": p.label, "Value": p.value} for p in task.reserved_ports
                ],
            }
        ],
    }
    if task.memory_limit_mb is not None:
        resources["MemoryMB"] = task.memory_limit_mb

    return {
        "Name": task.name,
        "Driver": task.driver,
        "Config": {"image": task.image},
        "Env": dict(task.env),
        "Services": [
            {"Name": s.name, "PortLabel": s.port_label} for s in task.services
        ],
        "Resources": resources,
    }


def job_to_dict(spec: JobSpec) -> Dict[str, Any]:
    """
    Convert a JobSpec to the Nomad JSON job document.

    Field names follow the Nomad HTTP API (PascalCase).
    """
    return {
        "ID": spec.id,
        "Name": spec.name,
        "Type": spec.type,
        "Region": spec.region,
        "Priority": spec.priority,
        "Datacenters": list(spec.datacenters),
        "TaskGroups": [
            {
                "Name": g.name,
                "Count": g.replica_count,
                "Tasks": [_task_to_dict(t) for t in g.tasks],
            }
            for g in spec.task_groups
        ],
    }
