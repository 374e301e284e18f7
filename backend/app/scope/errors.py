"""
Custom exceptions for caller scope resolution and authorization.
"""


class ScopeRequired(Exception):
    """Raised when a request does not carry enough information to pick a scope."""


class ScopeForbidden(Exception):
    """Raised when presented credentials are not valid for the requested organization."""


class ScopedResourceNotFound(Exception):
    """Raised when a resource does not exist inside the caller's scope."""
