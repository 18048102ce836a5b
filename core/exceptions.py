"""
Custom exceptions for better error handling.
"""
from typing import Any, Dict, Optional


class SpendScopeException(Exception):
    """Base exception for all SpendScope analysis errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ParsingError(SpendScopeException):
    """Raised when CSV text cannot be parsed into rows."""
    pass


class ValidationError(SpendScopeException):
    """Raised when an analyze request payload is invalid."""
    pass


class ConfigurationError(SpendScopeException):
    """Raised when configuration is invalid."""
    pass
