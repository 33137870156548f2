"""LINE Messaging API client.

Personal notifications are pushed as Flex "bubble" messages through the
Push Message API. No SDK is used; the endpoint is called with requests.
"""

from typing import Any, Dict, List, Optional

import requests
import structlog

logger = structlog.get_logger()

PUSH_PATH = "/v2/bot/message/push"

# LINE rejects altText longer than 400 characters
ALT_TEXT_LIMIT = 400


def build_flex_message(
    title: str,
    body: str,
    alt_text: str,
    caption: Optional[str] = None,
    accent_color: str = "#316745",
) -> Dict[str, Any]:
    """Build a kilo-sized Flex bubble.

    The header carries ``title``; the body shows ``caption`` in small grey
    text (when given) above ``body`` in bold, wrapped.

    Args:
        title: Header text (project name, or the digest title)
        body: Main text (card title, or the digest lines)
        alt_text: Text shown in chat lists and push previews
        caption: Optional line above the body (the action)
        accent_color: Header text color

    Returns:
        Flex message dict ready for the messages array
    """
    body_contents: List[Dict[str, Any]] = []
    if caption:
        body_contents.append(
            {"type": "text", "text": caption, "size": "xs", "color": "#999999"}
        )
    body_contents.append(
        {
            "type": "text",
            "text": body,
            "size": "md",
            "weight": "bold",
            "margin": "sm",
            "wrap": True,
        }
    )

    if len(alt_text) > ALT_TEXT_LIMIT:
        alt_text = alt_text[: ALT_TEXT_LIMIT - 3] + "..."

    return {
        "type": "flex",
        "altText": alt_text,
        "contents": {
            "type": "bubble",
            "size": "kilo",
            "header": {
                "type": "box",
                "layout": "vertical",
                "contents": [
                    {
                        "type": "text",
                        "text": title,
                        "size": "sm",
                        "color": accent_color,
                        "weight": "bold",
                    }
                ],
                "paddingBottom": "none",
            },
            "body": {
                "type": "box",
                "layout": "vertical",
                "contents": body_contents,
            },
        },
    }


def push_message(
    access_token: str,
    to: str,
    messages: List[Dict[str, Any]],
    api_url: str = "https://api.line.me",
    timeout: float = 10.0,
) -> requests.Response:
    """Call the Push Message API.

    Args:
        access_token: Channel access token
        to: LINE user id of the recipient
        messages: Message objects (at most 5)
        api_url: Messaging API base URL
        timeout: Request timeout in seconds

    Returns:
        The raw response; callers classify non-2xx statuses.

    Raises:
        requests.RequestException: On transport failure or timeout
    """
    url = api_url.rstrip("/") + PUSH_PATH
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {access_token}",
    }
    response = requests.post(
        url,
        json={"to": to, "messages": messages},
        headers=headers,
        timeout=timeout,
    )
    logger.debug("line_push_called", status_code=response.status_code)
    return response
