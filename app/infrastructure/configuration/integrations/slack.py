"""Slack integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class SlackSettings(IntegrationSettings):
    """Slack API configuration for the team broadcast channel.

    Environment Variables:
        SLACK_TOKEN: Slack bot token (xoxb-*)
        SLACK_BROADCAST_CHANNEL: Channel ID receiving every board event

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        slack_token = settings.slack.SLACK_TOKEN
        channel = settings.slack.SLACK_BROADCAST_CHANNEL
        ```
    """

    SLACK_TOKEN: str = ""
    SLACK_BROADCAST_CHANNEL: str = Field(default="", alias="SLACK_BROADCAST_CHANNEL")
