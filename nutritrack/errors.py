"""
ERRORS MODULE
=============

The closed set of failures a chat request can end in, plus normalize_error(),
which turns any of them into one (HTTP status, message) pair.

  ConfigurationError - OPENAI_API_KEY missing. 500.
  PayloadError       - Body is not a JSON object. 400.
  EmptyReplyError    - OpenAI answered with blank text. 502.
  UpstreamError      - The OpenAI call itself failed. Upstream status, else 502.
  DatasetFetchError  - Reference dataset could not be loaded. Never reaches
                       the client; the dataset cache logs it and carries on.
"""

from typing import Any, Optional

from nutritrack.models import FailureResult


CONFIGURATION_MESSAGE = "Missing OpenAI API key. Add OPENAI_API_KEY to your environment."
PAYLOAD_MESSAGE = "Invalid JSON payload."
EMPTY_REPLY_MESSAGE = "The assistant returned an empty response."
UPSTREAM_FALLBACK_MESSAGE = "Unable to generate a response. Please try again later."
UPSTREAM_FALLBACK_STATUS = 502


class NutriTrackError(Exception):
    """Base class for failures that are reported to the client."""

    status_code = 500
    message = UPSTREAM_FALLBACK_MESSAGE

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ConfigurationError(NutriTrackError):
    status_code = 500
    message = CONFIGURATION_MESSAGE


class PayloadError(NutriTrackError):
    status_code = 400
    message = PAYLOAD_MESSAGE


class EmptyReplyError(NutriTrackError):
    status_code = 502
    message = EMPTY_REPLY_MESSAGE


class UpstreamError(NutriTrackError):
    """
    A failed call to the completion service. status_code and message are
    whatever could be read off the client's exception; see from_exception().
    """

    def __init__(self, status_code: int = UPSTREAM_FALLBACK_STATUS, message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "UpstreamError":
        """
        Read status and message off an exception raised by the OpenAI client.

        openai.APIStatusError exposes status_code and a parsed body; other
        clients use status and an error mapping. Anything without a usable
        status becomes a 502.
        """
        return cls(_status_of(exc), _message_of(exc))


class DatasetFetchError(Exception):
    """The reference dataset could not be fetched or decoded. Internal only."""

    def __init__(self, source_id: str, reason: Any):
        self.source_id = source_id
        self.reason = reason
        super().__init__(f"Could not load dataset {source_id}: {reason}")


# ==============================================================================
# UPSTREAM ERROR SHAPES
# ==============================================================================

def _is_http_status(value: Any) -> bool:
    # bool is an int subclass; True is not a status code
    return isinstance(value, int) and not isinstance(value, bool) and 100 <= value <= 599


def _status_of(exc: BaseException) -> int:
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if _is_http_status(value):
            return value
    return UPSTREAM_FALLBACK_STATUS


def _nested_message(container: Any) -> Optional[str]:
    """Find message in {"error": {"message": ...}} or {"message": ...}."""
    if not isinstance(container, dict):
        return None
    inner = container.get("error")
    if isinstance(inner, dict) and isinstance(inner.get("message"), str) and inner["message"]:
        return inner["message"]
    if isinstance(container.get("message"), str) and container["message"]:
        return container["message"]
    return None


def _message_of(exc: BaseException) -> str:
    # Service-specific message first: the parsed response body, then an error mapping.
    message = _nested_message(getattr(exc, "body", None))
    if message:
        return message
    message = _nested_message({"error": getattr(exc, "error", None)})
    if message:
        return message

    top_level = getattr(exc, "message", None)
    if isinstance(top_level, str) and top_level:
        return top_level

    generic = str(exc)
    if generic:
        return generic
    return UPSTREAM_FALLBACK_MESSAGE


# ==============================================================================
# NORMALIZER
# ==============================================================================

def normalize_error(exc: NutriTrackError) -> FailureResult:
    """
    Map a chat failure to the status and message returned to the client.
    First match wins: configuration, payload, empty reply, upstream.
    """
    if isinstance(exc, ConfigurationError):
        return FailureResult(status_code=500, message=CONFIGURATION_MESSAGE)
    if isinstance(exc, PayloadError):
        return FailureResult(status_code=400, message=PAYLOAD_MESSAGE)
    if isinstance(exc, EmptyReplyError):
        return FailureResult(status_code=502, message=EMPTY_REPLY_MESSAGE)
    if isinstance(exc, UpstreamError):
        status = exc.status_code if _is_http_status(exc.status_code) else UPSTREAM_FALLBACK_STATUS
        return FailureResult(status_code=status, message=exc.message or UPSTREAM_FALLBACK_MESSAGE)
    return FailureResult(status_code=UPSTREAM_FALLBACK_STATUS, message=UPSTREAM_FALLBACK_MESSAGE)
