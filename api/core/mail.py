"""
SMTP mail helpers (aiosmtplib).

Used messages:
- welcome mail after registration (fire-and-forget)
- account verification OTP
- password reset OTP
"""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from . import config

logger = logging.getLogger(__name__)


# Mail failures are explicit and separable from other runtime errors.
class MailError(RuntimeError):
    pass


def smtp_host() -> str:
    return config.env_str("SMTP_HOST", "smtp-relay.brevo.com")


def smtp_port() -> int:
    return config.env_int("SMTP_PORT", 587)


def sender_email() -> str:
    return config.env_str("SENDER_EMAIL", "no-reply@localhost")


def send_attempts() -> int:
    return max(1, config.env_int("SMTP_SEND_ATTEMPTS", 2))


def mask_address(address: str) -> str:
    """
    Shorten an address for log lines: `ada@example.com` -> `a***@example.com`.
    """
    local, sep, domain = (address or "").strip().partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


def build_message(*, to: str, subject: str, text: str) -> EmailMessage:
    to = (to or "").strip()
    if not to:
        raise MailError("Recipient address is empty.")

    message = EmailMessage()
    message["From"] = sender_email()
    message["To"] = to
    message["Subject"] = subject
    message.set_content(text)
    return message


async def send_mail(
    *,
    to: str,
    subject: str,
    text: str,
    timeout_s: float = 30.0,
) -> None:
    """
    Deliver one plain-text message, retrying up to SMTP_SEND_ATTEMPTS times.
    """
    message = build_message(to=to, subject=subject, text=text)
    attempts = send_attempts()
    masked = mask_address(to)

    last_exc: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            await aiosmtplib.send(
                message,
                hostname=smtp_host(),
                port=smtp_port(),
                username=config.env_str("SMTP_USER") or None,
                password=config.env_str("SMTP_PASS") or None,
                start_tls=True,
                timeout=timeout_s,
            )
            logger.info("mail_sent to=%s subject=%r attempt=%s", masked, subject, attempt)
            return None
        except aiosmtplib.SMTPException as exc:
            last_exc = exc
            logger.warning("mail_send_failed to=%s attempt=%s/%s error=%s", masked, attempt, attempts, exc)
        except OSError as exc:
            last_exc = exc
            logger.warning("mail_connect_failed to=%s attempt=%s/%s error=%s", masked, attempt, attempts, exc)

    raise MailError(f"Failed to deliver mail to {masked}.") from last_exc


async def send_mail_quietly(*, to: str, subject: str, text: str) -> None:
    """
    Background-task variant: log delivery failures instead of raising.
    """
    try:
        await send_mail(to=to, subject=subject, text=text)
    except MailError:
        logger.exception("mail_dropped to=%s subject=%r", mask_address(to), subject)
