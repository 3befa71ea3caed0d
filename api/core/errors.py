"""
Application error taxonomy.

Services and repositories raise these; `main.py` turns them into
`{"message": ...}` responses with the matching status code.
"""

from __future__ import annotations


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request."


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found."


class AuthError(AppError):
    status_code = 401
    default_message = "Unauthorized."


class InvalidCredentialsError(AuthError):
    default_message = "Invalid credentials."


class MissingCredentialError(AuthError):
    default_message = "Missing Authorization header."


class MalformedCredentialError(AuthError):
    default_message = "Authorization must be: Bearer <token>."


class ExpiredOrInvalidCredentialError(AuthError):
    default_message = "Invalid or expired token."


class PersistenceError(AppError):
    default_message = "Database operation failed."


class ConstraintError(PersistenceError):
    default_message = "Database constraint violated."


class ConnectivityError(PersistenceError):
    default_message = "Database is unavailable."


class QueryError(PersistenceError):
    default_message = "Database query failed."


class MailRelayError(AppError):
    status_code = 502
    default_message = "Failed to send email. Please try again later."
