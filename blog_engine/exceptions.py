"""
Custom exceptions for blog_engine.

These exceptions provide specific error types for the infrastructure layer
while remaining compatible with RuntimeError.
"""

from typing import Any, Dict, Optional


class BlogEngineError(RuntimeError):
    """
    Base exception for blog_engine errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (uri, collection, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ConfigurationError(BlogEngineError):
    """
    Raised when configuration is invalid or missing.

    Configuration errors are fatal and never retried.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        super().__init__(message, context=context)
        self.config_key = config_key


class ConnectionRetryError(BlogEngineError):
    """
    Raised when every MongoDB connection attempt has failed.

    Attributes:
        message: Error message
        attempts: Number of connection attempts made
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        attempts: int,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        context["attempts"] = attempts
        super().__init__(message, context=context)
        self.attempts = attempts


class QueryError(BlogEngineError):
    """Raised when a query request is malformed."""
