"""Logging: one stream handler on the root logger, text or JSON lines, plus an access line per request."""
import json
import logging
import uuid
from time import perf_counter

from flask import g, request

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
REQUEST_ID_HEADER = "X-Request-ID"


class JSONFormatter(logging.Formatter):
    def format(self, record):
        entry = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            entry["request_id"] = request_id
        if record.exc_info and record.exc_info[0]:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _stream_handler(kind):
    handler = logging.StreamHandler()
    if kind == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def init_logging(app):
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger()
    root.handlers[:] = [_stream_handler(app.config.get("LOG_FORMAT", "text"))]
    root.setLevel(getattr(logging, level, logging.INFO))
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    @app.before_request
    def _rq_start():
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        g._rq_t0 = perf_counter()

    @app.after_request
    def _rq_stop(response):
        """Access line with status and duration; static files are skipped."""
        if request.path.startswith("/static"):
            return response

        t0 = getattr(g, "_rq_t0", None)
        if t0 is None:
            return response

        duration_ms = int((perf_counter() - t0) * 1000)
        app.logger.info(
            "%s %s %s %dms", request.method, request.path[:180], response.status_code, duration_ms,
            extra={"request_id": g.request_id},
        )
        response.headers[REQUEST_ID_HEADER] = g.request_id
        return response
