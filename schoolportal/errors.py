"""API errors and the handlers that turn them into JSON responses."""
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 400

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_dict(self):
        body = {"msg": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationFailed(ApiError):
    status_code = 400


class PermissionDenied(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    status_code = 409


def register_error_handlers(app):
    from . import db

    @app.errorhandler(ApiError)
    def _api_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def _http_error(err):
        return jsonify(msg=err.description), err.code

    @app.errorhandler(Exception)
    def _unexpected(err):
        logger.exception("Unhandled error")
        db.session.rollback()
        return jsonify(msg="Internal server error"), 500
