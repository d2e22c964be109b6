"""Unit tests for regcopy/error_utils.py"""

import requests

from regcopy.error_utils import (
    ActionableError,
    ErrorCategory,
    create_config_error,
    create_engine_error,
    create_registry_error,
    create_registry_status_error,
)


def test_format_message_lists_suggestions_and_details():
    error = ActionableError("Something broke", suggestions=["Try again"], details={"key": "value"})
    text = str(error)
    assert text.startswith("Something broke")
    assert "1. Try again" in text
    assert "key: value" in text


def test_registry_timeout_suggests_request_timeout():
    error = create_registry_error("reg:5000", "catalog", requests.Timeout("read timed out"))
    assert error.category == ErrorCategory.CONNECTION
    assert any("requestTimeout" in s for s in error.suggestions)


def test_status_error_categories():
    assert create_registry_status_error("reg", "catalog", 403).category == ErrorCategory.AUTHENTICATION
    assert create_registry_status_error("reg", "catalog", 502).category == ErrorCategory.PROTOCOL
    assert create_registry_status_error("reg", "tags app", 404).status_code == 404


def test_engine_error_for_auth_failure():
    error = create_engine_error(["docker", "image", "push", "dst/app:1"], 1, "denied: requested access")
    assert error.returncode == 1
    assert any("login" in s for s in error.suggestions)


def test_config_error_details():
    error = create_config_error("sourceInclude", "([", "invalid regular expression")
    assert error.category == ErrorCategory.CONFIGURATION
    assert error.details["value"] == "(["
