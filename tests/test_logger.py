import json
import logging

from flask import g

from utils.logger import JSONFormatter
from factories import TEST_SHOP


def _record(msg="hello"):
    return logging.LogRecord("services.qr_codes", logging.INFO, __file__, 10, msg, None, None)


def test_formats_plain_record_outside_request():
    entry = json.loads(JSONFormatter().format(_record()))

    assert entry["message"] == "hello"
    assert entry["level"] == "INFO"
    assert entry["logger"] == "services.qr_codes"
    assert "path" not in entry


def test_adds_request_id_and_shop_inside_request(app):
    with app.test_request_context("/app/qrcodes/3", headers={"X-Request-Id": "req-123"}):
        app.preprocess_request()
        g.shop = TEST_SHOP

        entry = json.loads(JSONFormatter().format(_record()))

    assert entry["path"] == "/app/qrcodes/3"
    assert entry["request_id"] == "req-123"
    assert entry["shop"] == TEST_SHOP


def test_request_id_echoed_on_response(client):
    response = client.get("/ping", headers={"X-Request-Id": "req-456"})
    assert response.headers["X-Request-Id"] == "req-456"


def test_request_id_generated_when_missing(client):
    response = client.get("/ping")
    assert len(response.headers["X-Request-Id"]) == 32
