#!/usr/bin/env python3
"""
Standardized exception hierarchy for the Web Vitals tracker.

Only provider failures are meant to reach the user; storage and
extraction anomalies are absorbed where they happen.
"""

from typing import Optional, Dict, Any


class WebVitalsError(Exception):
    """Base exception for all Web Vitals tracker errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Provider-related exceptions
class ProviderError(WebVitalsError):
    """Base exception for PageSpeed provider failures."""
    pass


class ProviderHTTPError(ProviderError):
    """Provider answered with a non-success status."""

    def __init__(self, status: int, provider_message: Optional[str] = None, url: Optional[str] = None):
        message = provider_message or f"HTTP error {status}"
        context = {
            'status': status,
            'url': url,
        }
        super().__init__(message, context=context)
        self.status = status


class ProviderConnectionError(ProviderError):
    """Failed to reach the provider."""

    def __init__(self, url: str, original_error: Exception):
        message = f"Failed to connect to PageSpeed API for {url}: {original_error}"
        context = {
            'url': url,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


class ProviderTimeoutError(ProviderError):
    """Provider request timed out."""

    def __init__(self, url: str, timeout_seconds: float):
        message = f"PageSpeed API timed out after {timeout_seconds}s for {url}"
        context = {
            'url': url,
            'timeout_seconds': timeout_seconds
        }
        super().__init__(message, context=context)


class ProviderResponseError(ProviderError):
    """Provider answered with a body that is not JSON."""

    def __init__(self, url: str, original_error: Exception):
        message = f"Invalid response from PageSpeed API for {url}"
        context = {
            'url': url,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


# Storage-related exceptions
class StorageError(WebVitalsError):
    """Writing to durable storage failed."""
    pass


# Configuration-related exceptions
class ConfigurationError(WebVitalsError, ValueError):
    """A configuration value cannot be parsed."""

    def __init__(self, config_key: str, issue: str):
        message = f"Configuration error for {config_key}: {issue}"
        context = {
            'config_key': config_key,
            'issue': issue
        }
        super().__init__(message, context=context)
