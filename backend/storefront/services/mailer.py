"""
OTP email delivery.

Three IEmailSender implementations:
- ResendEmailSender: customer codes through the Resend HTTP API (httpx)
- SMTPEmailSender: admin codes through an SMTP relay (stdlib smtplib in a
  worker thread)
- LoggingEmailSender: fallback that records the missed delivery (and the code in development)
  when no provider is configured
"""

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

import httpx

from storefront.core.exceptions import EmailDeliveryError
from storefront.core.retry import (
    TRANSIENT_HTTP_ERRORS,
    raise_for_retryable_status,
    retry_with_backoff,
)
from storefront.services.interfaces.email_sender import IEmailSender

logger = logging.getLogger(__name__)


def customer_otp_content(code: str, store_name: str, ttl_minutes: int) -> tuple[str, str, str]:
    """Subject, HTML and plain-text bodies for a customer login code."""
    subject = f"Your {store_name} OTP: {code}"
    html = (
        f"<div style=\"font-family:sans-serif;max-width:480px\">"
        f"<h2>{store_name}</h2>"
        f"<p>Your one-time password is:</p>"
        f"<p style=\"font-size:32px;font-weight:bold;letter-spacing:6px\">{code}</p>"
        f"<p>It expires in {ttl_minutes} minutes. If you did not request it, ignore this email.</p>"
        f"</div>"
    )
    text = f"Your {store_name} OTP is {code}. It expires in {ttl_minutes} minutes."
    return subject, html, text


def admin_otp_content(code: str, store_name: str, ttl_minutes: int) -> tuple[str, str, str]:
    """Subject, HTML and plain-text bodies for an admin login code."""
    subject = f"Admin Access OTP - {store_name}"
    html = (
        f"<div style=\"font-family:sans-serif;max-width:480px\">"
        f"<h2>{store_name} Admin</h2>"
        f"<p>Your admin login code is:</p>"
        f"<p style=\"font-size:32px;font-weight:bold;letter-spacing:6px\">{code}</p>"
        f"<p>Valid for {ttl_minutes} minutes. Never share this code.</p>"
        f"</div>"
    )
    text = f"Your {store_name} admin login code is {code}. Valid for {ttl_minutes} minutes."
    return subject, html, text


class ResendEmailSender(IEmailSender):
    """
    Sends customer OTPs with the Resend transactional email API.

    Attributes:
        api_key: Resend API key (Bearer token)
        api_url: Send endpoint, "https://api.resend.com/emails"
        sender: From address
        store_name: Used in subject and body
        ttl_minutes: Code lifetime quoted in the body
    """

    def __init__(
        self,
        api_key: str,
        sender: str,
        store_name: str,
        ttl_minutes: int = 10,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.store_name = store_name
        self.ttl_minutes = ttl_minutes
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    @retry_with_backoff(max_retries=2, base_delay=0.5, exceptions=TRANSIENT_HTTP_ERRORS)
    async def _post(self, payload: dict) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        return raise_for_retryable_status(response)

    async def send_otp(self, to: str, code: str) -> None:
        subject, html, text = customer_otp_content(code, self.store_name, self.ttl_minutes)
        payload = {
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "html": html,
            "text": text,
        }

        try:
            response = await self._post(payload)
        except TRANSIENT_HTTP_ERRORS as e:
            raise EmailDeliveryError(f"Email delivery failed: {e}") from e

        if response.is_error:
            try:
                detail = response.json().get("message") or response.text
            except ValueError:
                detail = response.text
            logger.error(
                "Resend rejected OTP email",
                extra={"status_code": response.status_code}
            )
            raise EmailDeliveryError(f"Email delivery failed: {detail}")

        logger.info("Customer OTP email sent", extra={"email_id": response.json().get("id")})


class SMTPEmailSender(IEmailSender):
    """
    Sends admin OTPs through an SMTP relay.

    Port 465 uses implicit TLS; any other port upgrades with STARTTLS.
    smtplib is blocking, so each send runs in a worker thread.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        store_name: str,
        ttl_minutes: int = 10,
        timeout: float = 15.0,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.store_name = store_name
        self.ttl_minutes = ttl_minutes
        self.timeout = timeout

    def build_message(self, to: str, code: str) -> EmailMessage:
        subject, html, text = admin_otp_content(code, self.store_name, self.ttl_minutes)
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = f"{self.store_name} <{self.user}>"
        message["To"] = to
        message.set_content(text)
        message.add_alternative(html, subtype="html")
        return message

    def _send_blocking(self, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context) as smtp:
                smtp.login(self.user, self.password)
                smtp.send_message(message)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.starttls(context=context)
                smtp.login(self.user, self.password)
                smtp.send_message(message)

    async def send_otp(self, to: str, code: str) -> None:
        message = self.build_message(to, code)
        try:
            await asyncio.to_thread(self._send_blocking, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery failed: {e}", extra={"smtp_host": self.host})
            raise EmailDeliveryError(f"Email delivery failed: {e}") from e

        logger.info("Admin OTP email sent", extra={"smtp_host": self.host})


class LoggingEmailSender(IEmailSender):
    """
    Development fallback used when no email provider is configured.

    Nothing is delivered. With ``reveal_code`` (OTP_LOG_FALLBACK) the code
    is written to the log so a developer can sign in locally; otherwise
    only the missed delivery is logged.
    """

    def __init__(self, channel: str = "email", reveal_code: bool = False):
        self.channel = channel
        self.reveal_code = reveal_code

    async def send_otp(self, to: str, code: str) -> None:
        if self.reveal_code:
            logger.warning(
                f"No {self.channel} provider configured; OTP for {to} is {code}",
                extra={"channel": self.channel}
            )
            return
        logger.warning(
            f"No {self.channel} provider configured; OTP not delivered",
            extra={"email": to, "channel": self.channel}
        )
