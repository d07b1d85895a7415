from __future__ import annotations
import os

NOMAD_HOST = os.environ.get("NOMADSEED_NOMAD_HOST", "localhost")
NOMAD_PORT = int(os.environ.get("NOMADSEED_NOMAD_PORT", "4646"))
HTTP_TIMEOUT = float(os.environ.get("NOMADSEED_HTTP_TIMEOUT", "30"))

DB_NAME = os.environ.get("NOMADSEED_DB_NAME", "myappdb")
DB_DRIVER = os.environ.get("NOMADSEED_DB_DRIVER", "mysql+pymysql")

WAIT_TIMEOUT = float(os.environ.get("NOMADSEED_WAIT_TIMEOUT", "60"))
WAIT_INTERVAL = float(os.environ.get("NOMADSEED_WAIT_INTERVAL", "3"))
