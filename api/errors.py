from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError as SchemaValidationError
from sqlalchemy.exc import IntegrityError
import logging

from services.errors import (
    AppError,
    Conflict,
    Forbidden,
    InternalError,
    InvalidCredentials,
    NotFound,
    Unauthorized,
    UploadError,
    ValidationError,
)

# Domain error -> (status, error code). Looked up along the MRO so subclasses
# (DuplicateEmail, SigningError) inherit their parent's mapping.
DOMAIN_ERRORS = {
    ValidationError: (422, "VALIDATION_ERROR"),
    Conflict: (409, "CONFLICT"),
    InvalidCredentials: (401, "INVALID_CREDENTIALS"),
    Unauthorized: (401, "UNAUTHORIZED"),
    Forbidden: (403, "FORBIDDEN"),
    NotFound: (404, "NOT_FOUND"),
    UploadError: (502, "UPLOAD_ERROR"),
    InternalError: (500, "INTERNAL_ERROR"),
}

# What clients see; auth failures stay vague on purpose
PUBLIC_MESSAGES = {
    InvalidCredentials: "Invalid email, password or refresh token",
    Forbidden: "Permission denied",
    UploadError: "Object storage request failed",
    InternalError: "An unexpected error occurred",
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def _lookup(err: AppError):
    for cls in type(err).__mro__:
        if cls in DOMAIN_ERRORS:
            return cls, DOMAIN_ERRORS[cls]
    return InternalError, DOMAIN_ERRORS[InternalError]


def register_error_handlers(app):
    # 400 Bad Request (generic)
    @app.errorhandler(400)
    def bad_request(e):
        if current_app and current_app.debug:
            logging.exception("Unhandled exception", exc_info=e)
        message = getattr(e, "description", "Bad request")
        return error_response("BAD_REQUEST", message, 400)

    # 404 Not Found
    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", getattr(e, "description", None) or "Resource not found", 404)

    # 409 Conflict
    @app.errorhandler(409)
    def conflict(e):
        message = getattr(e, "description", "Conflict")
        return error_response("CONFLICT", message, 409)

    # 413 Payload Too Large (MAX_CONTENT_LENGTH)
    @app.errorhandler(413)
    def too_large(e):
        return error_response("PAYLOAD_TOO_LARGE", "Request body is too large", 413)

    # 422 Unprocessable Entity (validation)
    @app.errorhandler(422)
    def unprocessable(e):
        message = getattr(e, "description", "Unprocessable entity")
        return error_response("VALIDATION_ERROR", message, 422)

    # Marshmallow validation errors map to 422
    @app.errorhandler(SchemaValidationError)
    def handle_validation_error(err: SchemaValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_ERROR", "Invalid input", 422, details=err.messages)

    # Errors raised by the workflows and the access gate
    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        cls, (status, code) = _lookup(err)
        if status >= 500:
            logging.error("%s: %s", type(err).__name__, err.message, exc_info=err)
        details = None
        if current_app and current_app.debug and cls is not InvalidCredentials:
            details = {"type": err.__class__.__name__, "message": err.message}
        message = PUBLIC_MESSAGES.get(cls, err.message)
        return error_response(code, message, status, details=details)

    # Integrity errors (unique constraints, FK violations, check constraints)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        if current_app and current_app.debug:
            logging.exception("Unhandled exception", exc_info=err)
        # Heuristics: tailor the status
        if "unique constraint" in lower_msg or "unique violation" in lower_msg:
            return error_response("CONFLICT", "Unique constraint violated.", 409, details={"db_error": message})
        if "foreign key constraint" in lower_msg or "foreign key mismatch" in lower_msg:
            return error_response("BAD_REQUEST", "Foreign key constraint failed.", 400, details={"db_error": message})
        if "check constraint" in lower_msg or "constraint failed" in lower_msg:
            return error_response("BAD_REQUEST", "Check constraint failed.", 400, details={"db_error": message})
        # Generic integrity issue
        return error_response("BAD_REQUEST", "Integrity error.", 400, details={"db_error": message})

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        # "Method Not Allowed" -> "METHOD_NOT_ALLOWED"
        code = (err.name or "Bad Request").upper().replace(" ", "_")
        return error_response(code, err.description, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logging.exception("Unhandled exception", exc_info=err)
        details = None
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
