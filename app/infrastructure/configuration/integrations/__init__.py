"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.slack import SlackSettings
from infrastructure.configuration.integrations.discord import DiscordSettings
from infrastructure.configuration.integrations.line import LineSettings

__all__ = [
    "SlackSettings",
    "DiscordSettings",
    "LineSettings",
]
