"""Tests for retry policy, request descriptors, credentials and results."""

from __future__ import annotations

import dataclasses

import pytest

from webapi_client import (
    ApiOutcomeError,
    ApiResponse,
    AuthScheme,
    Credential,
    ErrorKind,
    ErrorOutcome,
    RequestDescriptor,
    RetryPolicy,
    RetryPolicyError,
)


class TestRetryPolicy:
    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.enabled is True
        assert policy.base_delay_ms == 2000
        assert policy.max_retries == 3
        assert policy.backoff_factor == 2

    def test_default_schedule_doubles(self):
        assert list(RetryPolicy().delays_ms()) == [2000, 4000, 8000]

    def test_custom_base_delay(self):
        assert list(RetryPolicy(base_delay_ms=2500).delays_ms()) == [2500, 5000, 10000]

    @pytest.mark.parametrize("delay", [0, 1, 1999, -2000])
    def test_short_delay_rejected(self, delay):
        with pytest.raises(RetryPolicyError):
            RetryPolicy(base_delay_ms=delay)

    def test_replace_revalidates(self):
        policy = RetryPolicy()
        assert dataclasses.replace(policy, enabled=False).enabled is False
        with pytest.raises(RetryPolicyError):
            dataclasses.replace(policy, base_delay_ms=100)

    def test_max_retries_is_fixed(self):
        with pytest.raises(TypeError):
            RetryPolicy(max_retries=10)  # type: ignore[call-arg]

    def test_policy_is_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            RetryPolicy().enabled = False  # type: ignore[misc]


class TestRequestDescriptor:
    def test_resend_keeps_body_and_switches_to_json(self):
        original = RequestDescriptor(
            "POST",
            "https://api.example.com/v1/records",
            body=b"name=alice",
            content_type="application/x-www-form-urlencoded",
        )
        resend = original.for_resend()
        assert resend is not original
        assert resend.method == "POST"
        assert resend.url == original.url
        assert resend.body == b"name=alice"
        assert resend.content_type == "application/json"

    def test_resend_without_body_has_no_content_type(self):
        resend = RequestDescriptor("GET", "https://api.example.com").for_resend()
        assert resend.body is None
        assert resend.content_type is None


class TestCredential:
    def test_no_credential_has_no_header(self):
        assert Credential().authorization_header() is None
        assert Credential().scheme is AuthScheme.NONE

    def test_bearer_header(self):
        assert Credential.bearer("key123").authorization_header() == "Bearer key123"

    def test_basic_header(self):
        # base64("user:pass")
        assert Credential.basic("user", "pass").authorization_header() == "Basic dXNlcjpwYXNz"

    def test_repr_hides_secrets(self):
        assert "secret" not in repr(Credential.bearer("secret"))
        assert "secret" not in repr(Credential.basic("user", "secret"))


class TestApiResponse:
    def test_ok(self):
        result = ApiResponse.ok([1, 2])
        assert result.success
        assert result.records == [1, 2]
        assert result.raise_for_error() == [1, 2]

    def test_failed(self):
        outcome = ErrorOutcome.for_kind(ErrorKind.NOT_FOUND)
        result = ApiResponse.failed(outcome)
        assert not result.success
        assert result.records is None
        with pytest.raises(ApiOutcomeError) as exc_info:
            result.raise_for_error()
        assert exc_info.value.outcome is outcome
        assert exc_info.value.status_code == 404

    def test_only_invalid_request_keeps_detail(self):
        assert ErrorOutcome.for_kind(ErrorKind.BAD_REQUEST, "x").detail is None
        assert ErrorOutcome.for_kind(ErrorKind.INVALID_REQUEST, "x").detail == "x"
