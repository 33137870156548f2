"""Error classifiers for delivery targets.

Converts HTTP responses and client exceptions (requests, Slack SDK) into
OperationResult objects, so every channel adapter reports failures the
same way.

Usage:
    from infrastructure.operations.classifiers import classify_http_error

    try:
        response = requests.post(url, json=payload, timeout=10)
    except requests.RequestException as exc:
        return classify_http_error(exc)
    if not response.ok:
        return classify_http_response(response)
"""

from typing import Optional

import requests
from slack_sdk.errors import SlackApiError

from infrastructure.operations.result import OperationResult


def _retry_after(headers) -> Optional[int]:
    value = headers.get("Retry-After") if headers else None
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def classify_http_response(response: requests.Response) -> OperationResult:
    """Classify a non-2xx HTTP response.

    Status Code Mapping:
    - 429: Rate limiting -> TRANSIENT_ERROR with retry_after
    - 5xx: Server error -> TRANSIENT_ERROR
    - Other: Client error -> PERMANENT_ERROR

    Args:
        response: Response returned by requests

    Returns:
        OperationResult with error_code ``HTTP_<status>``
    """
    status_code = response.status_code
    error_code = f"HTTP_{status_code}"
    detail = (response.text or "")[:300]
    message = f"HTTP {status_code}: {detail}" if detail else f"HTTP {status_code}"

    if status_code == 429:
        return OperationResult.transient_error(
            f"Rate limited: {message}",
            error_code=error_code,
            retry_after=_retry_after(response.headers),
        )
    if status_code >= 500:
        return OperationResult.transient_error(
            f"Server error: {message}", error_code=error_code
        )
    return OperationResult.permanent_error(message, error_code=error_code)


def classify_http_error(exc: Exception) -> OperationResult:
    """Classify an exception raised while performing an HTTP call.

    - requests.Timeout -> TRANSIENT_ERROR (TIMEOUT)
    - requests.ConnectionError -> TRANSIENT_ERROR (CONNECTION_ERROR)
    - requests.HTTPError with a response -> classify_http_response
    - anything else -> TRANSIENT_ERROR (REQUEST_ERROR)

    Args:
        exc: Exception raised by requests

    Returns:
        OperationResult describing the failure
    """
    if isinstance(exc, requests.Timeout):
        return OperationResult.transient_error(
            f"Request timed out: {exc}", error_code="TIMEOUT"
        )
    if isinstance(exc, requests.ConnectionError):
        return OperationResult.transient_error(
            f"Connection error: {exc}", error_code="CONNECTION_ERROR"
        )
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return classify_http_response(exc.response)
    return OperationResult.transient_error(
        f"Request error: {type(exc).__name__}: {exc}", error_code="REQUEST_ERROR"
    )


def classify_slack_error(exc: Exception) -> OperationResult:
    """Classify a Slack Web API failure.

    ``ratelimited`` and 5xx responses are transient, other API errors
    (``channel_not_found``, ``invalid_auth``...) are permanent.

    Args:
        exc: Exception raised by slack_sdk

    Returns:
        OperationResult describing the failure
    """
    if isinstance(exc, SlackApiError):
        error = exc.response.get("error", "unknown_error") if exc.response else "unknown_error"
        status_code = getattr(exc.response, "status_code", None)
        if error == "ratelimited" or status_code == 429:
            headers = getattr(exc.response, "headers", None)
            return OperationResult.transient_error(
                f"Slack rate limited: {error}",
                error_code=error,
                retry_after=_retry_after(headers),
            )
        if status_code is not None and status_code >= 500:
            return OperationResult.transient_error(
                f"Slack server error: {error}", error_code=error
            )
        return OperationResult.permanent_error(
            f"Slack API error: {error}", error_code=error
        )
    return OperationResult.transient_error(
        f"Slack client error: {type(exc).__name__}: {exc}",
        error_code="SLACK_CLIENT_ERROR",
    )
