"""Personal channels.

Deliver one message to one user's push identity. Used for immediate
notifications and for flush digests.
"""

from abc import ABC, abstractmethod
from typing import Optional

import requests
import structlog

from infrastructure.operations import (
    OperationResult,
    classify_http_error,
    classify_http_response,
)
from integrations.line.client import build_flex_message, push_message

logger = structlog.get_logger()


class PersonalChannel(ABC):
    """Abstract base class for per-user push channels."""

    @property
    @abstractmethod
    def channel_name(self) -> str:
        pass

    @abstractmethod
    def send(
        self,
        identity: str,
        title: str,
        body: str,
        alt_text: str,
        caption: Optional[str] = None,
    ) -> OperationResult:
        """Push one message to ``identity``.

        Args:
            identity: Channel-specific recipient id (LINE user id)
            title: Heading of the message
            body: Main content
            alt_text: Plain-text fallback shown in previews
            caption: Optional short line shown above the body

        Returns:
            OperationResult; failures are returned, not raised.
        """
        pass


class LinePushChannel(PersonalChannel):
    """LINE Messaging API push with a Flex bubble.

    A missing access token makes every send a PERMANENT_ERROR
    (``LINE_NOT_CONFIGURED``) so callers treat the user as undelivered.
    """

    def __init__(
        self,
        access_token: Optional[str],
        api_url: str = "https://api.line.me",
        accent_color: str = "#316745",
        timeout: float = 10.0,
    ):
        self._access_token = access_token
        self._api_url = api_url
        self._accent_color = accent_color
        self._timeout = timeout
        if not access_token:
            logger.warning("line_channel_not_configured")

    @property
    def channel_name(self) -> str:
        return "line"

    def send(
        self,
        identity: str,
        title: str,
        body: str,
        alt_text: str,
        caption: Optional[str] = None,
    ) -> OperationResult:
        if not self._access_token:
            return OperationResult.permanent_error(
                "LINE channel access token is not configured",
                error_code="LINE_NOT_CONFIGURED",
            )

        message = build_flex_message(
            title=title,
            body=body,
            alt_text=alt_text,
            caption=caption,
            accent_color=self._accent_color,
        )
        try:
            response = push_message(
                self._access_token,
                identity,
                [message],
                api_url=self._api_url,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            result = classify_http_error(e)
            logger.warning(
                "line_push_failed",
                error=result.message,
                error_code=result.error_code,
                transient=result.is_transient,
            )
            return result

        if not response.ok:
            result = classify_http_response(response)
            logger.warning(
                "line_push_failed",
                error=result.message,
                error_code=result.error_code,
                transient=result.is_transient,
            )
            return result

        return OperationResult.success(
            message="LINE push delivered",
            data={"request_id": response.headers.get("X-Line-Request-Id")},
        )
