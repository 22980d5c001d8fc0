import base64
import hashlib
import hmac
import logging
import requests

logger = logging.getLogger(__name__)

API_BASE = "https://api.line.me/v2/bot/message"
MAX_MESSAGES_PER_CALL = 5


def verify_signature(body: str, signature: str, channel_secret: str) -> bool:
    """Check the X-Line-Signature header against the raw request body."""
    if not signature or not channel_secret:
        return False
    digest = hmac.new(channel_secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode("utf-8")
    return hmac.compare_digest(expected, signature)


class LineClient:
    def __init__(self, channel_access_token: str, timeout: float = 10):
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {channel_access_token}",
                "Content-Type": "application/json",
            }
        )

    def reply(self, reply_token: str, messages: list[dict]) -> None:
        # a reply token is single use, so extra messages are dropped
        if len(messages) > MAX_MESSAGES_PER_CALL:
            logger.warning(f"Reply truncated to {MAX_MESSAGES_PER_CALL} of {len(messages)} messages")
        self._post("reply", {"replyToken": reply_token, "messages": messages[:MAX_MESSAGES_PER_CALL]})

    def push(self, to: str, messages: list[dict]) -> None:
        for start in range(0, len(messages), MAX_MESSAGES_PER_CALL):
            self._post("push", {"to": to, "messages": messages[start:start + MAX_MESSAGES_PER_CALL]})

    def _post(self, endpoint: str, payload: dict) -> None:
        resp = self.session.post(f"{API_BASE}/{endpoint}", json=payload, timeout=self.timeout)
        if resp.status_code >= 400:
            logger.error(f"LINE {endpoint} failed with {resp.status_code}: {resp.text[:500]}")
        resp.raise_for_status()
