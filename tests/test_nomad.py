"""Tests for the Nomad submission client."""

import urllib.error

import pytest
from fastapi.testclient import TestClient

from nomadseed import settings
from nomadseed.arguments import resolve_arguments
from nomadseed.errors import ConnectError, SubmissionError
from nomadseed.jobspec import JobSpec, build_job_spec
from nomadseed.nomad import NomadClient, RegisterJobResponse, resolve_api_address

from fake_nomad import create_app, routing_opener


@pytest.fixture
def spec(db_arguments):
    return build_job_spec(resolve_arguments(db_arguments))


class TestResolveApiAddress:
    """Tests for resolve_api_address."""

    def test_bare_host_gets_scheme_and_port(self):
        assert resolve_api_address("nomad.local") == "http://nomad.local:4646"

    def test_ip_address(self):
        assert resolve_api_address("10.0.0.5") == "http://10.0.0.5:4646"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_default_host(self, value):
        assert resolve_api_address(value) == f"http://{settings.NOMAD_HOST}:4646"

    def test_explicit_scheme_kept(self):
        assert resolve_api_address("https://nomad.example.com:443/") == "https://nomad.example.com:443"


class TestRegisterJob:
    """Tests for NomadClient.register_job against the fake API."""

    def test_register(self, spec, nomad_app, nomad_client, nomad_opener):
        client = NomadClient("http://nomad.test:4646", opener=nomad_opener)

        result = client.register_job(spec)

        assert isinstance(result, RegisterJobResponse)
        assert result.eval_id
        assert result.job_modify_index == 1

        stored = nomad_client.get("/v1/job/myapp").json()
        assert stored["TaskGroups"][0]["Name"] == "myAppTaskGroup"
        assert len(stored["TaskGroups"][0]["Tasks"]) == 2

    def test_register_twice_is_upsert(self, spec, nomad_client, nomad_opener):
        client = NomadClient("http://nomad.test:4646", opener=nomad_opener)

        first = client.register_job(spec)
        second = client.register_job(spec)

        assert second.job_modify_index > first.job_modify_index
        jobs = nomad_client.get("/v1/jobs").json()
        assert [j["ID"] for j in jobs] == ["myapp"]

    def test_token_passed_through(self, spec):
        with TestClient(create_app(token="s3cret")) as tc:
            opener = routing_opener(tc)

            NomadClient("http://nomad.test:4646", token="s3cret", opener=opener).register_job(spec)

            with pytest.raises(SubmissionError) as excinfo:
                NomadClient("http://nomad.test:4646", token="wrong", opener=opener).register_job(spec)

        assert excinfo.value.details["status"] == 403

    def test_rejected_document(self, nomad_opener):
        client = NomadClient("http://nomad.test:4646", opener=nomad_opener)
        empty = JobSpec(id="", name="", region="eu", priority=50)

        with pytest.raises(SubmissionError) as excinfo:
            client.register_job(empty)

        assert excinfo.value.details["status"] == 400
        assert "required" in excinfo.value.details["body"]

    def test_unreachable(self, spec):
        def refused(req, timeout=None):
            raise urllib.error.URLError(ConnectionRefusedError(111, "Connection refused"))

        client = NomadClient("http://nomad.test:4646", opener=refused)

        with pytest.raises(ConnectError) as excinfo:
            client.register_job(spec)

        assert "Connection refused" in excinfo.value.details["cause"]

    def test_request_shape(self, spec):
        seen = {}

        class _Resp:
            def read(self):
                return b'{"EvalID": "e1", "JobModifyIndex": 7, "Warnings": null}'

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return False

        def opener(req, timeout=None):
            seen["method"] = req.get_method()
            seen["url"] = req.full_url
            seen["timeout"] = timeout
            return _Resp()

        result = NomadClient("http://nomad.test:4646/", opener=opener, timeout=5).register_job(spec)

        assert seen == {"method": "PUT", "url": "http://nomad.test:4646/v1/jobs", "timeout": 5}
        assert result.eval_id == "e1"
        assert result.job_modify_index == 7
        assert result.warnings is None
