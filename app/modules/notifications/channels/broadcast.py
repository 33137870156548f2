"""Broadcast channels.

Every card event is announced to one shared team sink. Delivery is
fire-and-forget: adapters report failures as OperationResult values and
never raise.
"""

from abc import ABC, abstractmethod
from typing import Optional

import requests
import structlog

from infrastructure.operations import (
    OperationResult,
    classify_http_error,
    classify_http_response,
    classify_slack_error,
)
from integrations.discord.client import build_embed, post_webhook
from integrations.slack.client import SlackClientManager
from modules.notifications.models import CardEvent

logger = structlog.get_logger()


class BroadcastChannel(ABC):
    """Abstract base class for broadcast sinks.

    Example Implementation:
        class ConsoleBroadcastChannel(BroadcastChannel):

            @property
            def channel_name(self) -> str:
                return "console"

            def send(self, event: CardEvent) -> OperationResult:
                print(event.line)
                return OperationResult.success()
    """

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """Channel identifier used in logs."""
        pass

    @abstractmethod
    def send(self, event: CardEvent) -> OperationResult:
        """Announce one event.

        Must return a failed OperationResult rather than raise.
        """
        pass


class DiscordBroadcastChannel(BroadcastChannel):
    """Posts each event as an embed to a Discord incoming webhook."""

    def __init__(self, webhook_url: str, color: int = 0x316745, timeout: float = 10.0):
        self._webhook_url = webhook_url
        self._color = color
        self._timeout = timeout

    @property
    def channel_name(self) -> str:
        return "discord"

    def send(self, event: CardEvent) -> OperationResult:
        payload = build_embed(
            title=f"📋 {event.project_name}",
            description=f"**{event.action}**: {event.card_title}",
            color=self._color,
        )
        try:
            response = post_webhook(self._webhook_url, payload, timeout=self._timeout)
        except requests.RequestException as e:
            result = classify_http_error(e)
            logger.warning(
                "discord_broadcast_failed",
                error=result.message,
                error_code=result.error_code,
            )
            return result

        if not response.ok:
            result = classify_http_response(response)
            logger.warning(
                "discord_broadcast_failed",
                error=result.message,
                error_code=result.error_code,
            )
            return result

        logger.debug("discord_broadcast_sent", project=event.project_name)
        return OperationResult.success(message="Discord webhook delivered")


class SlackBroadcastChannel(BroadcastChannel):
    """Posts each event to a Slack channel with chat.postMessage."""

    def __init__(self, token: str, channel_id: str, timeout: float = 10.0):
        self._token = token
        self._channel_id = channel_id
        self._timeout = max(1, int(timeout))

    @property
    def channel_name(self) -> str:
        return "slack"

    def send(self, event: CardEvent) -> OperationResult:
        client = SlackClientManager.get_client(self._token, timeout=self._timeout)
        text = f"📋 *{event.project_name}*\n*{event.action}*: {event.card_title}"
        try:
            response = client.chat_postMessage(
                channel=self._channel_id, text=text, unfurl_links=False
            )
        except Exception as e:  # pylint: disable=broad-except
            # SlackApiError, or urllib errors on transport failure
            result = classify_slack_error(e)
            logger.warning(
                "slack_broadcast_failed",
                channel=self._channel_id,
                error=result.message,
                error_code=result.error_code,
            )
            return result

        logger.debug("slack_broadcast_sent", channel=self._channel_id, ts=response.get("ts"))
        return OperationResult.success(
            message="Slack message posted", data={"ts": response.get("ts")}
        )


def build_broadcast_channel(
    backend: str,
    discord_webhook_url: Optional[str] = None,
    discord_color: int = 0x316745,
    slack_token: str = "",
    slack_channel: str = "",
    timeout: float = 10.0,
) -> Optional[BroadcastChannel]:
    """Create the configured broadcast channel.

    Returns:
        None when the backend is ``none`` or its credentials are missing.
    """
    if backend == "discord":
        if not discord_webhook_url:
            logger.info("broadcast_channel_disabled", backend=backend, reason="no_webhook_url")
            return None
        return DiscordBroadcastChannel(
            discord_webhook_url, color=discord_color, timeout=timeout
        )
    if backend == "slack":
        if not slack_token or not slack_channel:
            logger.info("broadcast_channel_disabled", backend=backend, reason="no_credentials")
            return None
        return SlackBroadcastChannel(slack_token, slack_channel, timeout=timeout)

    logger.info("broadcast_channel_disabled", backend=backend)
    return None
