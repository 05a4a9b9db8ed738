"""Tests for log processors and request context."""

from src.core.context import (
    clear_context,
    get_context,
    set_request_id,
    set_user_id,
)
from src.core.logging import add_context_processor, filter_sensitive_data


class TestFilterSensitiveData:
    """Credentials must never reach the log output."""

    def test_masks_password(self) -> None:
        event = filter_sensitive_data(None, "info", {"password": "hunter22secret"})
        assert event["password"] != "hunter22secret"
        assert event["password"].startswith("hu")
        assert event["password"].endswith("et")

    def test_short_values_fully_masked(self) -> None:
        event = filter_sensitive_data(None, "info", {"token": "abc"})
        assert event["token"] == "***"

    def test_nested_dict_masked(self) -> None:
        event = filter_sensitive_data(
            None, "info", {"headers": {"authorization": "Bearer abcdefgh"}}
        )
        assert "abcdefgh" not in event["headers"]["authorization"]

    def test_other_keys_untouched(self) -> None:
        event = filter_sensitive_data(
            None, "info", {"event": "post_created", "post_id": "42"}
        )
        assert event == {"event": "post_created", "post_id": "42"}


class TestRequestContext:
    """Context values flow into log events."""

    def teardown_method(self) -> None:
        clear_context()

    def test_generates_request_id(self) -> None:
        rid = set_request_id()
        assert rid
        assert get_context()["request_id"] == rid

    def test_context_merged_into_event(self) -> None:
        set_request_id("req-1")
        set_user_id("user-1")
        event = add_context_processor(None, "info", {"event": "x"})
        assert event["request_id"] == "req-1"
        assert event["user_id"] == "user-1"

    def test_clear_context(self) -> None:
        set_request_id("req-1")
        set_user_id("user-1")
        clear_context()
        assert get_context() == {}
