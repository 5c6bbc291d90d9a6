"""
Custom exceptions for the application.

This module defines domain-specific exceptions for better error handling
and more meaningful error messages throughout the application. The HTTP
status each one maps to is registered in main.py.
"""

from typing import Optional, Any, Dict


class ApplicationException(Exception):
    """Base exception for all application-specific exceptions."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class UnauthorizedException(ApplicationException):
    """
    Raised when an authenticated principal is required but absent.

    Guests may use every built-in route, so none raises this today; the 401
    handler in main.py serves routes that require a GitHub login.
    """

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ValidationException(ApplicationException):
    """Exception raised for validation errors (invalid arguments)."""
    pass


class NotFoundException(ApplicationException):
    """Exception raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Any):
        message = f"{resource} not found: {identifier}"
        super().__init__(message, {"resource": resource, "identifier": identifier})


class ConfigurationException(ApplicationException):
    """Exception raised when a collaborator is not configured."""
    pass


class StoreException(ApplicationException):
    """Base for failures of the underlying persistence backend."""
    pass


class DatabaseException(StoreException):
    """Exception raised for relational database errors."""
    pass


class ExternalServiceException(ApplicationException):
    """Exception raised when an external service (Redis, GitHub) fails."""

    def __init__(self, service: str, message: str, details: Optional[Dict[str, Any]] = None):
        full_message = f"{service} error: {message}"
        details = details or {}
        details["service"] = service
        super().__init__(full_message, details)


class RedisException(StoreException, ExternalServiceException):
    """Exception raised for Redis-specific errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        ExternalServiceException.__init__(self, "Redis", message, details)


class OAuthException(ExternalServiceException):
    """Exception raised when the GitHub OAuth handshake fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("GitHub", message, details)
