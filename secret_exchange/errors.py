from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .extensions import db


logger = logging.getLogger(__name__)


class SecretExchangeError(Exception):
    status_code = 500
    public_message = "Internal error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


# --------- Core errors ----------

class RandomSourceExhausted(SecretExchangeError, RuntimeError):
    """The secure random source failed. Not retried."""
    status_code = 503
    public_message = "Secure random source unavailable"


class MalformedInput(SecretExchangeError, ValueError):
    status_code = 400
    public_message = "Malformed input"


class AssignmentError(SecretExchangeError, RuntimeError):
    pass


class ConstraintViolation(AssignmentError, ValueError):
    status_code = 400
    public_message = "Need at least 2 participants"


class AssignmentExhausted(AssignmentError):
    status_code = 500
    public_message = "Could not create valid assignments"


# --------- Application errors ----------

class InvalidRequest(SecretExchangeError):
    status_code = 400
    public_message = "Invalid request"

    def __init__(self, message: str | None = None, details=None):
        super().__init__(message)
        self.details = details


class Unauthorized(SecretExchangeError):
    status_code = 401
    public_message = "Missing authorization token"


class Forbidden(SecretExchangeError):
    status_code = 403
    public_message = "Not authorized"


class NotFound(SecretExchangeError):
    status_code = 404
    public_message = "Not found"


class Conflict(SecretExchangeError):
    status_code = 409
    public_message = "Conflict"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(SecretExchangeError)
    def handle_exchange_error(e: SecretExchangeError):
        if e.status_code >= 500:
            logger.error("%s: %s", type(e).__name__, e.message)
        body = {"error": e.message}
        details = getattr(e, "details", None)
        if details:
            body["errors"] = details
        return jsonify(body), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"error": e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        db.session.rollback()
        return jsonify({"error": "Internal error"}), 500
