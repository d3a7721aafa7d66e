from __future__ import annotations

from typing import Any, Mapping

MISSING_SECRET_MESSAGE = "Missing client secret in response"
SESSION_FALLBACK_MESSAGE = "Unable to start ChatKit session."


class SessionError(RuntimeError):
    """Raised when a widget session credential cannot be obtained."""


class SessionConfigurationError(SessionError):
    """Raised when the workflow identifier is missing or still a placeholder."""


class SubmissionError(RuntimeError):
    """Raised when the quiz or survey endpoint rejects a submission."""

    def __init__(self, endpoint: str, status_code: int) -> None:
        super().__init__(f"API {status_code}")
        self.endpoint = endpoint
        self.status_code = status_code


def _message_of(value: Any) -> str | None:
    if isinstance(value, Mapping):
        message = value.get("message")
        if isinstance(message, str):
            return message
    return None


def extract_error_detail(payload: Mapping[str, Any] | None, fallback: str) -> str:
    """Pick the most specific human readable message from an error payload.

    Looks at ``error``, ``error.message``, ``details``, ``details.error``,
    ``details.error.message`` and ``message`` in that order and returns
    ``fallback`` when none of them holds a string.
    """

    if not payload:
        return fallback

    error = payload.get("error")
    if isinstance(error, str):
        return error
    message = _message_of(error)
    if message is not None:
        return message

    details = payload.get("details")
    if isinstance(details, str):
        return details
    if isinstance(details, Mapping) and "error" in details:
        nested = details["error"]
        if isinstance(nested, str):
            return nested
        message = _message_of(nested)
        if message is not None:
            return message

    top_level = payload.get("message")
    if isinstance(top_level, str):
        return top_level
    return fallback
