"""Domain exceptions."""

from __future__ import annotations


class DebridError(Exception):
    """Base class for all debrid-related errors."""


class DebridServiceError(DebridError):
    """Raised on transport failures, non-success responses or unparsable payloads."""


class DebridAuthError(DebridError):
    """Raised when the debrid service rejects the credential."""


class CatalogLoadError(Exception):
    """Raised when a bundled lookup catalog cannot be read or validated."""
