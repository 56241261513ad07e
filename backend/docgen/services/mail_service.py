"""Outbound email through the Resend HTTP API."""
import base64
import logging
from dataclasses import dataclass, field

import httpx
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from docgen.config import settings
from docgen.exceptions import DeliveryFailure, ValidationError

logger = logging.getLogger(__name__)

MISSING_RECIPIENT = "Recipient email is required for email action"

_email_address = TypeAdapter(EmailStr)


def validate_recipient(recipient: str | None, missing_message: str = MISSING_RECIPIENT) -> str:
    """Normalized recipient address.

    Raises:
        ValidationError: the address is empty or not a valid email address.
    """
    recipient = (recipient or "").strip()
    if not recipient:
        raise ValidationError(missing_message)
    try:
        return _email_address.validate_python(recipient)
    except PydanticValidationError:
        raise ValidationError(f"Invalid recipient email: {recipient}")


@dataclass
class Attachment:
    filename: str
    content: bytes


@dataclass
class OutboundEmail:
    to: list[str]
    subject: str
    html: str
    reply_to: str | None = None
    attachments: list[Attachment] = field(default_factory=list)


class ResendMailer:
    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        sender: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = (api_url or settings.resend_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.sender = sender or settings.mail_from
        self.timeout = timeout or settings.http_timeout
        self._transport = transport

    def payload(self, message: OutboundEmail) -> dict:
        body = {
            "from": self.sender,
            "to": message.to,
            "subject": message.subject,
            "html": message.html,
        }
        if message.reply_to:
            body["reply_to"] = message.reply_to
        if message.attachments:
            body["attachments"] = [
                {"filename": a.filename, "content": base64.b64encode(a.content).decode("ascii")}
                for a in message.attachments
            ]
        return body

    async def send(self, message: OutboundEmail) -> str | None:
        """Send ``message``; returns the provider's message id.

        Raises:
            DeliveryFailure: transport error or a non-2xx response.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.api_url}/emails",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=self.payload(message),
                )
        except httpx.HTTPError as exc:
            logger.error("Email send failed: %s", exc)
            raise DeliveryFailure("Failed to send email", original_error=exc)

        if response.status_code >= 300:
            detail = response.text[:200]
            logger.error("Email provider returned HTTP %d: %s", response.status_code, detail)
            raise DeliveryFailure(f"Failed to send email: HTTP {response.status_code}")

        try:
            message_id = response.json().get("id")
        except ValueError:
            message_id = None
        logger.info("Email sent to %s (id=%s)", ", ".join(message.to), message_id)
        return message_id


def get_mailer() -> ResendMailer:
    return ResendMailer()
