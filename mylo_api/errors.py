# -*- coding: utf-8 -*-
"""Exception classes raised by services and translated to JSON responses."""


class ApiError(Exception):
    """Base exception for all errors that map to an HTTP response."""

    status_code = 500
    code = 'internal_error'

    def __init__(self, message: str, code: str = None, details=None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details

    def to_dict(self):
        body = {'error': self.code, 'message': self.message}
        if self.details:
            body['details'] = self.details
        return body


class ValidationError(ApiError):
    """Raised when request input is malformed or missing (400)."""
    status_code = 400
    code = 'validation_error'


class AuthError(ApiError):
    """Raised when a credential or session is missing or invalid (401)."""
    status_code = 401
    code = 'unauthorized'


class NotFoundError(ApiError):
    """Raised when a referenced entity does not exist (404)."""
    status_code = 404
    code = 'not_found'


class DependencyError(ApiError):
    """Raised when the database, Redis or SendGrid fails (500)."""
    status_code = 500
    code = 'dependency_error'


class SessionStoreError(DependencyError):
    """Raised when the key-value store rejects a read or write."""
    code = 'session_store_error'


class EmailDispatchError(DependencyError):
    """Raised when a sign-in code could not be handed to SendGrid."""
    code = 'email_dispatch_error'
