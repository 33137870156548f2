"""Notification channel implementations."""

from modules.notifications.channels.broadcast import (
    BroadcastChannel,
    DiscordBroadcastChannel,
    SlackBroadcastChannel,
    build_broadcast_channel,
)
from modules.notifications.channels.personal import LinePushChannel, PersonalChannel

__all__ = [
    "BroadcastChannel",
    "DiscordBroadcastChannel",
    "SlackBroadcastChannel",
    "build_broadcast_channel",
    "PersonalChannel",
    "LinePushChannel",
]
