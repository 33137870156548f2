"""LINE Messaging API integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class LineSettings(IntegrationSettings):
    """LINE Messaging API configuration used for personal push messages.

    Environment Variables:
        LINE_MESSAGING_CHANNEL_ACCESS_TOKEN: Long-lived channel access token
        LINE_API_URL: Messaging API base URL (default: https://api.line.me)
        LINE_ACCENT_COLOR: Header text color of the Flex bubble

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        token = settings.line.LINE_MESSAGING_CHANNEL_ACCESS_TOKEN
        ```
    """

    LINE_MESSAGING_CHANNEL_ACCESS_TOKEN: str | None = Field(
        default=None, alias="LINE_MESSAGING_CHANNEL_ACCESS_TOKEN"
    )
    LINE_API_URL: str = Field(default="https://api.line.me", alias="LINE_API_URL")
    LINE_ACCENT_COLOR: str = Field(default="#316745", alias="LINE_ACCENT_COLOR")
