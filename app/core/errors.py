"""Domain errors raised by the store and services.

Routers translate these into HTTP responses (see app/api/errors.py).
None of them carry HTTP concepts themselves.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for recoverable errors surfaced to the caller."""


class NotFoundError(DomainError):
    pass


class ForbiddenError(DomainError):
    pass


class UnauthenticatedError(DomainError):
    pass


class ConflictError(DomainError):
    pass


class ValidationError(DomainError, ValueError):
    pass


class ProtectedResourceError(DomainError):
    """Attempt to delete or demote the protected admin user."""
