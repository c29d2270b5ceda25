"""
Unit tests for custom exceptions.

Tests exception hierarchy and error messages.
"""

from blog_engine.exceptions import (
    BlogEngineError,
    ConfigurationError,
    ConnectionRetryError,
    QueryError,
)
from blog_engine.models import FieldValidationError


class TestExceptionHierarchy:
    """Test exception inheritance hierarchy."""

    def test_blog_engine_error_is_runtime_error(self):
        assert isinstance(BlogEngineError("test error"), RuntimeError)

    def test_subclasses(self):
        for error in (
            ConfigurationError("bad config"),
            ConnectionRetryError("gave up", attempts=3),
            QueryError("bad query"),
            FieldValidationError("title", "required"),
        ):
            assert isinstance(error, BlogEngineError)
            assert isinstance(error, RuntimeError)


class TestExceptionMessages:
    """Test exception message formatting."""

    def test_message_without_context(self):
        error = BlogEngineError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.context == {}

    def test_message_with_context(self):
        error = BlogEngineError("Query failed", context={"collection": "blogs"})
        assert str(error) == "Query failed (context: collection=blogs)"

    def test_configuration_error_key(self):
        error = ConfigurationError("Missing URI", config_key="MONGODB_URI")

        assert error.config_key == "MONGODB_URI"
        assert error.context["config_key"] == "MONGODB_URI"

    def test_connection_retry_error_attempts(self):
        error = ConnectionRetryError(
            "Failed to connect", attempts=6, context={"db_name": "blog"}
        )

        assert error.attempts == 6
        assert error.context == {"db_name": "blog", "attempts": 6}
        assert "attempts=6" in str(error)

    def test_field_validation_error(self):
        error = FieldValidationError("email", "Please enter a valid email address")

        assert error.field == "email"
        assert error.message == "Please enter a valid email address"
