"""
Custom Exception Classes
========================

Application-specific exceptions for the catalog advisor.

Every error carries a human-readable ``message``, a ``details`` dict for
logs and API responses, and an optional ``remediation`` telling the user
what to do about it.

"No products found" is not an error: extraction, deduplication and
scoring return empty results instead of raising.
"""

from typing import Any


class CatalogAdvisorError(Exception):
    """Base exception for the catalog advisor service."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        remediation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.remediation = remediation


class ExternalServiceError(CatalogAdvisorError):
    """Base for failures of the generative text service."""

    pass


class ExternalServiceUnavailable(ExternalServiceError):
    """
    Raised on timeouts, network errors, rate limits, auth failures
    and server errors from the generative service.

    Recoverable: extraction falls through to the next strategy and
    explanations degrade to rule-based text.
    """

    pass


class ExternalServiceBillingExhausted(ExternalServiceError):
    """
    Raised when the generative service rejects a request for billing
    or quota reasons (HTTP 402).

    Kept distinct from ExternalServiceUnavailable so callers can show
    a top-up remediation next to the local fallback output.
    """

    pass


class MalformedExternalResponse(ExternalServiceError):
    """Raised when generative output cannot be parsed into the expected shape."""

    pass


class ValidationError(CatalogAdvisorError):
    """Raised when caller input is structurally invalid."""

    pass


class DocumentError(CatalogAdvisorError):
    """Raised when an uploaded document is not a readable PDF."""

    pass


class NotFoundError(CatalogAdvisorError):
    """Raised when a requested record does not exist."""

    pass


class ConflictError(CatalogAdvisorError):
    """Raised when a write would violate a uniqueness constraint (e.g. SKU)."""

    pass


class DatabaseError(CatalogAdvisorError):
    """Raised when database operations fail."""

    pass


class ConfigurationError(CatalogAdvisorError):
    """Raised when configuration is invalid."""

    pass
