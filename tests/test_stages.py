"""Tests for the stage handlers."""

import pytest

from nomadseed import stages
from nomadseed.errors import ConnectError, MissingRequiredKey, ReadinessTimeout, StageCanceled
from nomadseed.model import Argument


@pytest.fixture
def sqlite_store(monkeypatch, sqlite_url):
    """Point the database stages at a SQLite file instead of MySQL."""
    monkeypatch.setattr(stages, "database_url", lambda args: sqlite_url)
    return sqlite_url


class TestDeployApplication:
    """Tests for deploy_application."""

    def test_registers_job(self, db_arguments, fake_urlopen, nomad_client, capsys):
        stages.deploy_application(db_arguments + [Argument("NOMAD_API", "nomad.test")])

        job = nomad_client.get("/v1/job/myapp").json()
        assert job["TaskGroups"][0]["Tasks"][0]["Env"]["MYAPP_DB_HOST"] == "host.docker.internal:3306"
        assert "registered job 'myapp' at http://nomad.test:4646" in capsys.readouterr().out

    def test_resolved_host(self, db_arguments, fake_urlopen, nomad_client):
        stages.deploy_application(db_arguments, use_resolved_host=True)

        job = nomad_client.get("/v1/job/myapp").json()
        assert job["TaskGroups"][0]["Tasks"][0]["Env"]["MYAPP_DB_HOST"] == "127.0.0.1:3306"

    def test_missing_credentials(self, fake_urlopen):
        with pytest.raises(MissingRequiredKey) as excinfo:
            stages.deploy_application([Argument("MYAPP_USER", "root")])

        assert excinfo.value.missing == ("MYAPP_PASS",)
        assert excinfo.value.stage == stages.DEPLOY_APPLICATION

    def test_connection_error_tagged(self, monkeypatch, db_arguments):
        import urllib.error
        import urllib.request

        def refused(req, timeout=None):
            raise urllib.error.URLError("refused")

        monkeypatch.setattr(urllib.request, "urlopen", refused)

        with pytest.raises(ConnectError) as excinfo:
            stages.deploy_application(db_arguments)

        assert excinfo.value.stage == stages.DEPLOY_APPLICATION


class TestWaitForDb:
    """Tests for wait_for_db."""

    def test_ready(self, db_arguments, sqlite_store):
        stages.wait_for_db(db_arguments, timeout=1, interval=0.01)

    def test_timeout(self, monkeypatch, db_arguments):
        monkeypatch.setattr(stages, "url_probe", lambda url, **kwargs: (lambda: False))

        with pytest.raises(ReadinessTimeout) as excinfo:
            stages.wait_for_db(db_arguments, timeout=0.05, interval=0.01)

        assert excinfo.value.stage == stages.WAIT_FOR_DB

    def test_connect_timeout_follows_interval(self, monkeypatch, db_arguments):
        seen = {}

        def fake_url_check(url, **kwargs):
            seen.update(kwargs)
            return lambda: True

        monkeypatch.setattr(stages, "url_probe", fake_url_check)

        stages.wait_for_db(db_arguments, timeout=1, interval=2.5)

        assert seen == {"connect_timeout": 2.5}

    def test_port_out_of_range(self, db_arguments):
        args = [Argument("MYAPP_HOST", "127.0.0.1:99999")] + db_arguments[1:]

        with pytest.raises(ConnectError) as excinfo:
            stages.wait_for_db(args, timeout=60, interval=3)

        assert "127.0.0.1:99999" in excinfo.value.message
        assert excinfo.value.stage == stages.WAIT_FOR_DB

    def test_requires_host(self):
        with pytest.raises(MissingRequiredKey) as excinfo:
            stages.wait_for_db([Argument("MYAPP_USER", "root"), Argument("MYAPP_PASS", "pw")])

        assert excinfo.value.missing == ("MYAPP_HOST",)

    def test_canceled_before_start(self, db_arguments):
        import threading

        cancel = threading.Event()
        cancel.set()

        with pytest.raises(StageCanceled):
            stages.wait_for_db(db_arguments, cancel=cancel)


class TestImportTestData:
    """Tests for import_test_data."""

    def test_seeds(self, db_arguments, sqlite_store, read_names):
        stages.import_test_data(db_arguments)

        assert len(read_names()) == 12
