from __future__ import annotations

import json
import logging
import sys

import pytest

from medportal.app.env import get_env
from medportal.app.logging import JsonFormatter, setup_logging


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("medportal.test", logging.INFO, __file__, 1, msg, (), None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_json_formatter_basic_fields():
    payload = json.loads(JsonFormatter().format(_record()))

    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "medportal.test"
    assert "http" not in payload
    assert "error" not in payload


def test_json_formatter_document_and_http_context():
    payload = json.loads(
        JsonFormatter().format(
            _record(document_id=7, storage_path="1-2-a.pdf", http_method="GET", path="/api/documents/7", status_code=404)
        )
    )

    assert payload["document_id"] == 7
    assert payload["storage_path"] == "1-2-a.pdf"
    assert payload["http"] == {"method": "GET", "path": "/api/documents/7", "status": 404}


def test_json_formatter_includes_error_stack():
    try:
        raise RuntimeError("disk gone")
    except RuntimeError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))

    assert payload["error"]["type"] == "RuntimeError"
    assert payload["error"]["message"] == "disk gone"
    assert "Traceback" in payload["error"]["stack"]


@pytest.fixture
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    get_env.cache_clear()


@pytest.mark.usefixtures("_restore_root_logging")
def test_setup_logging_prod_defaults_to_json_info(monkeypatch):
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_FORMAT", raising=False)
    get_env.cache_clear()

    setup_logging()

    root = logging.getLogger()
    assert root.level == logging.INFO
    assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


@pytest.mark.usefixtures("_restore_root_logging")
def test_setup_logging_explicit_overrides(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("LOG_FORMAT", "plain")

    setup_logging()

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert not any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)


@pytest.mark.usefixtures("_restore_root_logging")
def test_setup_logging_local_defaults_to_plain_debug(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_FORMAT", raising=False)
    get_env.cache_clear()

    setup_logging()

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert not any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
