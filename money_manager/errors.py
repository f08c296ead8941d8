# money_manager/errors.py
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger("money-manager")


class ApiError(Exception):
    """Base class for errors that are reported to the client as-is."""
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401


class InvalidCredentials(Unauthorized):
    def __init__(self, message="Invalid credentials"):
        super().__init__(message)


class InvalidToken(Unauthorized):
    def __init__(self, message="Token is invalid or expired"):
        super().__init__(message)


class NotFound(ApiError):
    status_code = 404


class Conflict(ApiError):
    status_code = 409


def error_response(message, status_code):
    return jsonify({"success": False, "error": message}), status_code


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err):
        return error_response(err.message, err.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        if err.code == 404:
            return error_response("Route not found", 404)
        return error_response(err.name, err.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err):
        logger.exception("Unhandled error")
        return error_response("Server Error", 500)
