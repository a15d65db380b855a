"""Unit tests for response normalization."""

import asyncio
from typing import Any

import pytest
import structlog

from src.net.constants import MESSAGE_COMMUNICATION_FAILED, MESSAGE_TIMED_OUT
from src.net.errors import NetErrorClass
from src.net.metrics import NetMetrics
from src.net.models import RequestOptions, TimeoutOutcome
from src.net.normalizer import NormalizedResult, ResponseNormalizer
from src.net.notify import Notifier
from tests.helpers.transport import FakeResponse, Recorder, json_response


URL = "https://api.example.com/x"


@pytest.fixture(autouse=True)
def reset_metrics() -> None:
    """Start each test with fresh metrics."""
    NetMetrics.reset()


@pytest.fixture
def recorder() -> Recorder:
    """Create a notification recorder."""
    return Recorder()


def normalize(
    outcome: Any,
    recorder: Recorder | None = None,
    **options: Any,
) -> NormalizedResult:
    """Normalize an outcome with the given options."""
    normalizer = ResponseNormalizer(Notifier(recorder))
    log: structlog.stdlib.BoundLogger = structlog.get_logger()
    return asyncio.run(
        normalizer.normalize(URL, outcome, RequestOptions(**options), log)
    )


class TestNoResponse:
    """Tests for absent and synthetic outcomes."""

    def test_missing_outcome_is_444(self, recorder: Recorder) -> None:
        """Test that no outcome at all resolves to 444."""
        result = normalize(None, recorder)

        assert result.status == 444
        assert result.envelope.error is True
        assert result.envelope.message == MESSAGE_COMMUNICATION_FAILED
        assert result.envelope.response is None
        assert result.error is not None
        assert result.error.error_class == NetErrorClass.TRANSPORT_FAILURE
        assert recorder.reasons == ["feedback"]

    def test_timeout_keeps_its_message(self) -> None:
        """Test that the timeout outcome's message survives normalization."""
        result = normalize(TimeoutOutcome())

        assert result.status == 444
        assert result.envelope.message == MESSAGE_TIMED_OUT
        assert result.envelope.severity == "error"
        assert result.error is not None
        assert result.error.error_class == NetErrorClass.TIMEOUT


class TestBodies:
    """Tests for body parsing."""

    def test_json_object_merges_into_envelope(self) -> None:
        """Test that JSON object keys become envelope fields."""
        response = json_response({"data": [1], "count": 1, "extra": "x"})

        result = normalize(response)

        assert result.envelope.data == [1]
        assert result.envelope.extra("count") == 1
        assert result.envelope.extra("extra") == "x"
        assert result.envelope.response is response
        assert result.envelope.url == URL
        assert result.error is None

    def test_json_array_becomes_data(self) -> None:
        """Test that non-object JSON is assigned to data."""
        result = normalize(json_response([1, 2]))

        assert result.envelope.data == [1, 2]

    def test_body_cannot_override_url(self) -> None:
        """Test that a url key in the body does not replace the request URL."""
        result = normalize(json_response({"url": "https://evil", "data": 1}))

        assert result.envelope.url == URL

    def test_empty_json_body_is_text(self) -> None:
        """Test that an empty JSON body is kept as an empty string."""
        response = FakeResponse(body="", headers={"Content-Type": "application/json"})

        result = normalize(response)

        assert result.envelope.data == ""

    def test_json_content_type_must_be_prefix(self) -> None:
        """Test that only application/json content types are parsed."""
        response = FakeResponse(
            body='{"data": 1}', headers={"Content-Type": "text/json"}
        )

        result = normalize(response)

        assert result.envelope.data == '{"data": 1}'

    def test_error_field_is_coerced(self) -> None:
        """Test that a truthy error value in the body flags the envelope."""
        result = normalize(json_response({"error": "bad input", "message": 42}))

        assert result.envelope.error is True
        assert result.envelope.message == "42"


class TestStatusRules:
    """Tests for status classification and notifications."""

    def test_non_200_sets_generic_error(self, recorder: Recorder) -> None:
        """Test that non-200 statuses get the fixed message."""
        result = normalize(json_response({"message": "x"}, status=418), recorder)

        assert result.envelope.error is True
        assert result.envelope.message == MESSAGE_COMMUNICATION_FAILED
        assert result.envelope.severity == "error"
        assert recorder.reasons == ["feedback"]

    def test_401_is_not_a_generic_error(self, recorder: Recorder) -> None:
        """Test that 401 emits logout without setting the error flag."""
        result = normalize(json_response({}, status=401), recorder)

        assert result.envelope.error is None
        assert result.error is None
        assert recorder.reasons == ["logout", "feedback"]

    def test_feedback_true_behaves_like_default(self, recorder: Recorder) -> None:
        """Test that feedback=True does not emit on success."""
        normalize(json_response({"data": 1}), recorder, feedback=True)

        assert recorder.events == []

    def test_throw_false_has_no_error(self) -> None:
        """Test that throw=False produces no error to raise."""
        result = normalize(None, throw=False)

        assert result.failed is True
        assert result.error is None


class TestValue:
    """Tests for the value handed back to callers."""

    def test_raw_returns_envelope(self) -> None:
        """Test that raw returns the envelope itself."""
        result = normalize(json_response({"data": 1}))

        assert result.value(RequestOptions(raw=True)) is result.envelope

    def test_falsy_data_is_not_annotated(self) -> None:
        """Test that empty payloads are returned as-is."""
        result = normalize(json_response({"data": [], "count": 0}))

        value = result.value(RequestOptions())

        assert value == []
        assert type(value) is list
