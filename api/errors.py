from flask import jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
import logging

from services.errors import SessionError, InternalError

logger = logging.getLogger(__name__)


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"success": False, "error": error, "message": message}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # Session and auth-gate failures carry their own status and code
    @app.errorhandler(SessionError)
    def handle_session_error(err: SessionError):
        # InternalError causes are logged where they are converted
        return error_response(err.code, err.message, err.status)

    # Marshmallow validation errors: a required field is missing or empty
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return error_response("VALIDATION_ERROR", "All fields are required.", 400, details=err.messages)

    # 404 Not Found
    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", 404)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.name.upper().replace(" ", "_"), err.description, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        return error_response(InternalError.code, InternalError.message, 500)
