from typing import Dict, Tuple

from slack_sdk import WebClient


class SlackClientManager:
    """Manages Slack API clients. One WebClient is kept per token and timeout."""

    _clients: Dict[Tuple[str, int], WebClient] = {}

    @classmethod
    def get_client(cls, token: str, timeout: int = 10) -> WebClient:
        """Returns a shared WebClient for the given token."""
        key = (token, timeout)
        if key not in cls._clients:
            cls._clients[key] = WebClient(token=token, timeout=timeout)
        return cls._clients[key]
