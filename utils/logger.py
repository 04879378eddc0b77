import json
import logging
import sys
import uuid
from datetime import datetime, timezone

from flask import g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-Id"


def _request_fields():
    fields = {
        "method": request.method,
        "path": request.path,
        "remote_ip": request.remote_addr,
    }
    request_id = getattr(g, "request_id", None)
    if request_id:
        fields["request_id"] = request_id
    # Set once a session token resolves to an installed shop
    shop = getattr(g, "shop", None)
    if shop:
        fields["shop"] = shop
    return fields


class JSONFormatter(logging.Formatter):
    """One JSON object per line; request fields are added inside a Flask request."""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "lineno": record.lineno,
        }
        if has_request_context():
            entry.update(_request_fields())
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logger(app, level=logging.INFO):
    """
    JSON logs on stdout for the app, werkzeug and module loggers
    (services.*, database), which propagate to root. Under gunicorn its
    error handlers are used instead.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    gunicorn_logger = logging.getLogger("gunicorn.error")
    if gunicorn_logger.handlers:
        app.logger.handlers = gunicorn_logger.handlers
        app.logger.setLevel(gunicorn_logger.level)
    else:
        app.logger.handlers = [handler]
        app.logger.setLevel(level)

    logging.getLogger("werkzeug").handlers = [handler]

    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(handler)
        root.setLevel(level)

    @app.before_request
    def assign_request_id():
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

    @app.after_request
    def echo_request_id(response):
        if getattr(g, "request_id", None):
            response.headers.setdefault(REQUEST_ID_HEADER, g.request_id)
        return response

    app.logger.info("JSON logging configured")
