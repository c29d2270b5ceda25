"""
Unit tests for AppError classification, user messages and retry().
"""

from unittest.mock import AsyncMock, patch

import pytest
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from blog_engine.errors import (
    API_STATUS_MESSAGES,
    AppError,
    ErrorKind,
    api_error,
    auth_error,
    classify_exception,
    form_errors,
    is_retryable,
    network_error,
    retry,
    user_message,
    validation_error,
)
from blog_engine.models import FieldValidationError


class TestUserMessage:
    """Test the user-facing message table."""

    @pytest.mark.parametrize("status", sorted(API_STATUS_MESSAGES))
    def test_known_api_statuses(self, status):
        assert user_message(api_error("raw", status)) == API_STATUS_MESSAGES[status]

    def test_forbidden_message(self):
        assert (
            user_message(api_error("nope", 403))
            == "You don't have permission to perform this action."
        )

    def test_unknown_status_uses_message(self):
        assert user_message(api_error("Teapot", 418)) == "Teapot"

    def test_unknown_status_without_message(self):
        assert user_message(api_error("", 418)) == "An unexpected error occurred."

    def test_network(self):
        assert user_message(network_error()) == (
            "Network connection failed. Please check your internet connection."
        )

    def test_validation_uses_own_message(self):
        assert user_message(validation_error("Title is required", "title")) == "Title is required"

    def test_validation_without_message(self):
        assert user_message(validation_error("")) == "Please check your input and try again."

    def test_auth(self):
        assert user_message(auth_error()) == "Authentication failed. Please log in again."

    def test_unknown_kind(self):
        assert user_message(AppError(ErrorKind.UNKNOWN)) == "An unexpected error occurred."

    def test_plain_exception(self):
        assert user_message(ValueError("bad value")) == "bad value"
        assert user_message(ValueError()) == "An unexpected error occurred."


class TestFormErrors:
    def test_field_errors_from_payload(self):
        error = api_error("Invalid", 422, data={"errors": {"email": "taken", "age": 3}})
        assert form_errors(error) == {"email": "taken", "age": "3"}

    def test_no_payload(self):
        assert form_errors(api_error("Invalid", 422)) == {}
        assert form_errors(network_error()) == {}
        assert form_errors(RuntimeError("x")) == {}

    def test_errors_not_a_mapping(self):
        assert form_errors(api_error("Invalid", 422, data={"errors": ["a", "b"]})) == {}


class TestClassifyException:
    def test_app_error_passthrough(self):
        error = auth_error()
        assert classify_exception(error) is error

    def test_field_validation_error(self):
        result = classify_exception(FieldValidationError("title", "Blog title is required"))

        assert result.kind is ErrorKind.VALIDATION
        assert result.field == "title"
        assert result.status == 400
        assert result.message == "Blog title is required"

    def test_invalid_object_id(self):
        result = classify_exception(InvalidId("'abc' is not a valid ObjectId"))

        assert result.kind is ErrorKind.API
        assert result.status == 400
        assert result.message.startswith("Invalid id:")

    def test_duplicate_key(self):
        exc = DuplicateKeyError(
            'E11000 duplicate key error collection: blog.users index: email_1 '
            'dup key: { email: "jane@example.com" }'
        )

        result = classify_exception(exc)

        assert result.status == 400
        assert result.message == (
            'Duplicate field value: email: "jane@example.com". Please use another value!'
        )

    def test_unrecognised_error_is_generic(self):
        result = classify_exception(KeyError("secret internals"))

        assert result.kind is ErrorKind.UNKNOWN
        assert result.status == 500
        assert result.message == "Something went wrong!"
        assert "secret" not in user_message(result)

    def test_to_dict(self):
        assert validation_error("Too long", "title").to_dict() == {
            "kind": "validation",
            "message": "Too long",
            "status": 400,
            "field": "title",
        }


class TestIsRetryable:
    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 422])
    def test_client_errors_are_final(self, status):
        assert is_retryable(api_error("x", status)) is False

    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503])
    def test_transient_statuses(self, status):
        assert is_retryable(api_error("x", status)) is True

    def test_errors_without_status(self):
        assert is_retryable(network_error()) is True
        assert is_retryable(ConnectionError("reset")) is True


class TestRetry:
    """Test retry() with exponential backoff."""

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        fn = AsyncMock(return_value="ok")

        with patch("blog_engine.errors.asyncio.sleep", new=AsyncMock()) as sleep:
            assert await retry(fn) == "ok"

        fn.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_forbidden_is_not_retried(self):
        error = api_error("Forbidden", 403)
        fn = AsyncMock(side_effect=error)

        with patch("blog_engine.errors.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(AppError) as exc_info:
                await retry(fn, max_attempts=3)

        assert exc_info.value is error
        assert fn.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [503, 429])
    async def test_transient_error_retried_until_exhausted(self, status):
        fn = AsyncMock(side_effect=api_error("unavailable", status))

        with patch("blog_engine.errors.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(AppError) as exc_info:
                await retry(fn, max_attempts=3)

        assert exc_info.value.status == status
        assert fn.await_count == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_backoff_doubles_with_jitter(self):
        fn = AsyncMock(side_effect=[network_error(), network_error(), "ok"])

        with (
            patch("blog_engine.errors.asyncio.sleep", new=AsyncMock()) as sleep,
            patch("blog_engine.errors.random.random", return_value=0.5),
        ):
            assert await retry(fn, max_attempts=3, base_delay=2.0) == "ok"

        delays = [c.args[0] for c in sleep.await_args_list]
        assert delays == [3.0, 5.0]

    @pytest.mark.asyncio
    async def test_invalid_attempts(self):
        with pytest.raises(ValueError):
            await retry(AsyncMock(), max_attempts=0)
