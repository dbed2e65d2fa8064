from __future__ import annotations


class GovernorError(Exception):
    """Base error for the route governor."""


class ValidationError(GovernorError):
    """Raised when user input is invalid."""


class ConfigurationError(GovernorError):
    """Raised when static configuration (e.g. the tier table) is inconsistent."""


class StorageError(GovernorError):
    """Raised when the key-value backend fails to read or write."""


class ExternalServiceError(GovernorError):
    """Raised when the routing provider fails (transport, status, payload)."""


class AuthorizationError(ExternalServiceError):
    """Raised when the provider rejects the API key (HTTP 401)."""


class QuotaExceededError(ExternalServiceError):
    """Raised when the provider reports throttling (HTTP 429)."""
