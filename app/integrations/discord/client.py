"""Discord incoming webhook client."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests


def build_embed(
    title: str,
    description: str,
    color: int = 0x316745,
    timestamp: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build a single-embed webhook payload."""
    timestamp = timestamp or datetime.now(timezone.utc)
    return {
        "embeds": [
            {
                "title": title,
                "description": description,
                "color": color,
                "timestamp": timestamp.isoformat(),
            }
        ]
    }


def post_webhook(
    webhook_url: str, payload: Dict[str, Any], timeout: float = 10.0
) -> requests.Response:
    """POST a payload to a Discord webhook.

    Raises:
        requests.RequestException: On transport failure or timeout
    """
    return requests.post(webhook_url, json=payload, timeout=timeout)
