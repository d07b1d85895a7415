# nomad.py
from __future__ import annotations

import json
import socket
import urllib.error
import urllib.request
from typing import Any, Callable, Optional
from urllib.parse import urljoin

from pydantic import BaseModel, ConfigDict, Field

from . import settings
from .errors import ConnectError, SubmissionError
from .jobspec import JobSpec, job_to_dict
from .ui.console import get_console


class RegisterJobResponse(BaseModel):
    """Body Nomad returns from a job register (upsert) call."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    eval_id: str = Field(default="", alias="EvalID")
    eval_create_index: int = Field(default=0, alias="EvalCreateIndex")
    job_modify_index: int = Field(default=0, alias="JobModifyIndex")
    warnings: Optional[str] = Field(default=None, alias="Warnings")


def resolve_api_address(value: str | None) -> str:
    """
    Turn the NOMAD_API argument into a base URL.

    A bare host gets the http:// scheme and the Nomad port
    ("nomad.local" -> "http://nomad.local:4646"). An empty value falls back
    to the configured default host. A value that already carries a scheme
    is used as given.
    """
    host = (value or "").strip() or settings.NOMAD_HOST
    if "://" in host:
        return host.rstrip("/")
    return f"http://{host}:{settings.NOMAD_PORT}"


class NomadClient:
    """HTTP client for the few Nomad API calls this plugin needs."""

    def __init__(
        self,
        address: str,
        token: Optional[str] = None,
        *,
        timeout: float = settings.HTTP_TIMEOUT,
        opener: Optional[Callable[..., Any]] = None,
    ):
        """
        Initialize API client.

        Args:
            address: Base URL of the Nomad API (e.g., "http://127.0.0.1:4646")
            token: Optional ACL token, sent as X-Nomad-Token
            timeout: Socket timeout in seconds for each request
            opener: urlopen-compatible callable (default: urllib.request.urlopen)
        """
        self.address = address.rstrip("/")
        self.token = token or None
        self.timeout = timeout
        self._open = opener or urllib.request.urlopen

    def _request(self, method: str, path: str, data: Optional[dict] = None) -> dict:
        """
        Make an HTTP request to the API.

        Raises:
            ConnectError: if the API cannot be reached
            SubmissionError: if the API answers with an error status
        """
        url = urljoin(self.address + "/", path.lstrip("/"))

        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["X-Nomad-Token"] = self.token

        body = None
        if data is not None:
            body = json.dumps(data).encode("utf-8")

        req = urllib.request.Request(url, data=body, headers=headers, method=method)

        try:
            with self._open(req, timeout=self.timeout) as response:
                raw = response.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8", errors="replace") if e.fp else ""
            raise SubmissionError(
                message=f"Nomad API rejected {method} {path}: {e.code} {e.reason}",
                details={"status": e.code, "body": error_body.strip()},
            ) from e
        except urllib.error.URLError as e:
            raise ConnectError(
                message=f"could not reach Nomad API at {self.address}",
                details={"cause": str(e.reason)},
            ) from e
        except (socket.timeout, ConnectionError) as e:
            raise ConnectError(
                message=f"could not reach Nomad API at {self.address}",
                details={"cause": str(e)},
            ) from e

        if not raw:
            return {}
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise SubmissionError(
                message=f"invalid JSON from Nomad API for {method} {path}",
                details={"cause": str(e)},
            ) from e

    def register_job(self, spec: JobSpec) -> RegisterJobResponse:
        """
        Register (create or update) a job.

        Single attempt; registering the same spec again updates the
        existing job instead of creating a second one.
        """
        console = get_console()
        console.print_debug(f"PUT {self.address}/v1/jobs (job={spec.id})")

        response = self._request("PUT", "/v1/jobs", data={"Job": job_to_dict(spec)})
        result = RegisterJobResponse.model_validate(response)

        if result.warnings:
            console.print_info(f"Nomad warnings: {result.warnings}")
        return result
