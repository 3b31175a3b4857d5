"""
Outbound notification transports.

Two independent, best-effort channels:
- email through the Resend HTTP API
- chat through the WhatsApp Cloud API

Every call is bounded by TRANSPORT_TIMEOUT_SECONDS. Without credentials a
channel runs in log-only mode and reports a mocked success, so local and test
environments behave like a working deployment. Senders never raise: callers
get a DeliveryResult and decide what a failure means for them.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from backend.app.core.settings import get_settings

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
WHATSAPP_API_URL = "https://graph.facebook.com/v19.0/{phone_id}/messages"


@dataclass
class DeliveryResult:
    ok: bool
    mocked: bool = False
    error: Optional[str] = None


class DeliveryError(Exception):
    """Raised by outbox handlers when a required delivery failed."""


class EmailSender:
    def __init__(self, api_key: str, from_address: str, timeout: float):
        self.api_key = api_key
        self.from_address = from_address
        self.timeout = timeout

    def send(self, to: str, subject: str, html: str) -> DeliveryResult:
        if not to:
            return DeliveryResult(ok=False, error="NO_EMAIL")
        if not self.api_key:
            logger.info(f"[MOCK EMAIL] to={to} subject={subject!r}")
            return DeliveryResult(ok=True, mocked=True)
        try:
            response = httpx.post(
                RESEND_API_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"from": self.from_address, "to": [to], "subject": subject, "html": html},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Email send to {to} failed: {e}")
            return DeliveryResult(ok=False, error=str(e) or e.__class__.__name__)
        return DeliveryResult(ok=True)


class ChatSender:
    def __init__(self, token: str, phone_id: str, timeout: float, fallback_to: str = ""):
        self.token = token
        self.phone_id = phone_id
        self.timeout = timeout
        self.fallback_to = fallback_to

    def send(self, to: Optional[str], body: str) -> DeliveryResult:
        recipient = to or self.fallback_to
        if not self.token or not self.phone_id or not recipient:
            logger.info(f"[MOCK CHAT] to={recipient} body={body!r}")
            return DeliveryResult(ok=True, mocked=True)
        try:
            response = httpx.post(
                WHATSAPP_API_URL.format(phone_id=self.phone_id),
                headers={"Authorization": f"Bearer {self.token}"},
                json={
                    "messaging_product": "whatsapp",
                    "to": recipient,
                    "type": "text",
                    "text": {"body": body},
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Chat send to {recipient} failed: {e}")
            return DeliveryResult(ok=False, error=str(e) or e.__class__.__name__)
        return DeliveryResult(ok=True)


class Notifier:
    """Bundles the channels a user can be reached on."""

    def __init__(self, email: EmailSender, chat: ChatSender):
        self.email = email
        self.chat = chat

    def send_email(self, user, subject: str, html: str) -> DeliveryResult:
        return self.email.send(getattr(user, "email", None), subject, html)

    def send_chat(self, user, body: str) -> DeliveryResult:
        return self.chat.send(getattr(user, "whatsapp_to", None), body)

    def notify_user(self, user, subject: str, html: str, text: str) -> bool:
        """Send on every channel the user has; True if any channel delivered."""
        delivered = False
        if getattr(user, "email", None):
            delivered = self.send_email(user, subject, html).ok or delivered
        if getattr(user, "whatsapp_to", None):
            delivered = self.send_chat(user, text).ok or delivered
        return delivered


_notifier_instance = None


def get_notifier() -> Notifier:
    """Return the process-wide notifier built from settings."""
    global _notifier_instance
    if _notifier_instance is None:
        settings = get_settings()
        _notifier_instance = Notifier(
            email=EmailSender(settings.resend_api_key, settings.email_from, settings.transport_timeout_seconds),
            chat=ChatSender(
                settings.whatsapp_token,
                settings.whatsapp_phone_id,
                settings.transport_timeout_seconds,
                fallback_to=settings.whatsapp_test_to,
            ),
        )
    return _notifier_instance
