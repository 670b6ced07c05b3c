# src/georegistry/tests/test_logging/test_middleware_integration.py
import json
import logging

from fastapi import FastAPI
from starlette.testclient import TestClient

from georegistry.core.logging.builder import setup_logging
from georegistry.core.logging.middleware import RequestIDMiddleware


class S:
    LOG_FORMAT = "json"
    LOG_LEVEL = "INFO"
    LOG_TO_STDOUT = True
    LOG_DIR = None
    LOG_MAX_BYTES = 1000
    LOG_BACKUP_COUNT = 1
    ENV = "production"
    ENABLE_SQL_LOGGING = False


def make_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)

    @app.get("/hello")
    def hello():
        logging.getLogger("georegistry").info("handling hello")
        return {"ok": True}

    return app


def test_request_id_in_response_and_logs(capsys):
    setup_logging(S())
    client = TestClient(make_app())

    resp = client.get("/hello")
    assert resp.status_code == 200

    rid = resp.headers.get("X-Request-ID")
    assert rid is not None

    stderr = capsys.readouterr().err.strip()
    assert stderr, "Expected logs on stderr but nothing was captured."

    found = False
    for line in stderr.splitlines():
        try:
            rec = json.loads(line)
        except ValueError:
            continue
        if rec.get("request_id") == rid:
            found = True
            break

    assert found, "No log line on stderr with matching request_id"


def test_incoming_request_id_is_echoed():
    client = TestClient(make_app())
    resp = client.get("/hello", headers={"X-Request-ID": "trace.42-a"})
    assert resp.headers["X-Request-ID"] == "trace.42-a"


def test_malformed_request_id_is_replaced():
    client = TestClient(make_app())
    resp = client.get("/hello", headers={"X-Request-ID": "bad id with spaces"})
    rid = resp.headers["X-Request-ID"]
    assert rid != "bad id with spaces"
    assert len(rid) == 36
