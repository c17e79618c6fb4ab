from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from html import escape
from typing import Iterable, Optional

import httpx
import structlog

from config import get_settings
from schemas import OrderItem

logger = structlog.get_logger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"

class NotificationError(Exception):
    pass

@dataclass
class EmailMessage:
    to: str
    subject: str
    body: str
    html_body: Optional[str] = None

class EmailPort(ABC):
    """Abstract interface for email dispatch adapters."""

    @abstractmethod
    def send(self, message: EmailMessage, code: str) -> None:
        ...

class SendGridEmailAdapter(EmailPort):
    def __init__(self, api_key: str, sender: str, timeout: float = 10.0, transport: httpx.BaseTransport | None = None):
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout
        self.transport = transport

    def send(self, message: EmailMessage, code: str) -> None:
        content = [{"type": "text/plain", "value": message.body}]
        if message.html_body:
            content.append({"type": "text/html", "value": message.html_body})
        payload = {
            "personalizations": [{"to": [{"email": message.to}]}],
            "from": {"email": self.sender},
            "subject": message.subject,
            "content": content,
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.post(
                    SENDGRID_URL,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationError(f"SendGrid rejected the message ({e.response.status_code}): {e.response.text[:200]}") from e
        except httpx.HTTPError as e:
            raise NotificationError(f"SendGrid unreachable: {e}") from e

class LogOnlyEmailAdapter(EmailPort):
    """Used when no email provider is configured; the code goes to the log instead."""

    def send(self, message: EmailMessage, code: str) -> None:
        logger.warning("Email delivery disabled, verification code logged", to=message.to, code=code)

_adapter: Optional[EmailPort] = None

def get_notifier() -> EmailPort:
    global _adapter
    if _adapter is None:
        settings = get_settings()
        if settings.SENDGRID_API_KEY:
            _adapter = SendGridEmailAdapter(settings.SENDGRID_API_KEY, settings.EMAIL_FROM)
            logger.info("SendGrid email delivery configured")
        else:
            _adapter = LogOnlyEmailAdapter()
            logger.warning("SENDGRID_API_KEY not set, email delivery disabled")
    return _adapter

def set_notifier(adapter: Optional[EmailPort]) -> None:
    global _adapter
    _adapter = adapter

def build_verification_email(
    to: str, employee_name: str, code: str, items: Iterable[OrderItem], total: float
) -> EmailMessage:
    items = list(items)
    lines = [f"{i.quantity}x {i.name} - ${i.price * i.quantity:.2f}" for i in items]
    body = "\n".join(
        [
            f"Hello {employee_name},",
            "",
            "Thanks for your order. Use this verification code to confirm it:",
            "",
            code,
            "",
            "Order details:",
            *lines,
            "",
            f"Total: ${total:.2f}",
        ]
    )
    html_items = "".join(f"<li>{escape(line)}</li>" for line in lines)
    html_body = (
        "<h1>Your café order</h1>"
        f"<p>Hello {escape(employee_name)},</p>"
        "<p>Thanks for your order. Use this verification code to confirm it:</p>"
        f'<h2 style="letter-spacing: 5px; text-align: center;">{code}</h2>'
        f"<p><strong>Order details:</strong></p><ul>{html_items}</ul>"
        f"<p><strong>Total: ${total:.2f}</strong></p>"
    )
    return EmailMessage(
        to=to,
        subject=f"Your café order verification code: {code}",
        body=body,
        html_body=html_body,
    )

def send_verification_code(
    order_id: str, to: str, employee_name: str, code: str, items: list[OrderItem], total: float
) -> None:
    message = build_verification_email(to, employee_name, code, items, total)
    try:
        get_notifier().send(message, code)
    except Exception:
        logger.exception("Verification email failed", order_id=order_id, to=to)
        return
    logger.info("Verification email dispatched", order_id=order_id, to=to)
