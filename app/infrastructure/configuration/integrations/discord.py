"""Discord integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class DiscordSettings(IntegrationSettings):
    """Discord webhook configuration.

    Environment Variables:
        DISCORD_WEBHOOK_URL: Incoming webhook of the team chatroom
        DISCORD_EMBED_COLOR: Embed accent color (default: 0x316745)
    """

    DISCORD_WEBHOOK_URL: str | None = Field(default=None, alias="DISCORD_WEBHOOK_URL")
    DISCORD_EMBED_COLOR: int = Field(default=0x316745, alias="DISCORD_EMBED_COLOR")
