"""
Session and auth-gate failures.

Each error carries the status and machine code the API answers with, so
the Flask error handler can render any of them without a lookup table.
"""


class SessionError(Exception):
    status = 500
    code = "INTERNAL_ERROR"
    message = "Internal Server Error"

    def __init__(self, message=None, status=None):
        self.message = message or self.message
        if status is not None:
            self.status = status
        super().__init__(self.message)


class MissingFields(SessionError):
    status = 400
    code = "VALIDATION_ERROR"
    message = "All fields are required."


class EmailConflict(SessionError):
    # 401 kept for compatibility with existing clients
    status = 401
    code = "CONFLICT"

    def __init__(self, email):
        super().__init__(f"User with this email {email} already exists.")
        self.email = email


class InvalidCredentials(SessionError):
    status = 401
    code = "INVALID_CREDENTIALS"
    message = "Invalid email or password."


class MissingRefreshToken(SessionError):
    status = 401
    code = "MISSING_TOKEN"
    message = "Refresh token not found."


class InvalidRefreshToken(SessionError):
    status = 403
    code = "INVALID_TOKEN"
    message = "Invalid refresh token."


class Unauthorized(SessionError):
    status = 401
    code = "UNAUTHORIZED"
    message = "Authorization header missing."


class Forbidden(SessionError):
    status = 403
    code = "FORBIDDEN"
    message = "Invalid or expired token."


class InternalError(SessionError):
    pass
