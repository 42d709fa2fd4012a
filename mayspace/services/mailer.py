"""
Mailer Service
Delivers password reset codes through the Gmail REST API (OAuth2 refresh
token) or plain SMTP, falling back to a log line when neither is configured.
"""
import base64
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List

import httpx

from mayspace.core.config import settings

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GMAIL_SEND_URL = "https://gmail.googleapis.com/gmail/v1/users/me/messages/send"


class MailerError(Exception):
    pass


def build_message(to: str, subject: str, html: str) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.mail_sender
    msg["To"] = to
    msg.attach(MIMEText(html, "html", "utf-8"))
    return msg


def encode_for_gmail(msg: MIMEMultipart) -> str:
    """Gmail wants the RFC 2822 message as unpadded base64url."""
    return base64.urlsafe_b64encode(msg.as_bytes()).decode("ascii").rstrip("=")


def otp_recipients(to: str) -> List[str]:
    recipients = [to]
    if settings.AUDIT_EMAIL and settings.AUDIT_EMAIL.lower() != to.lower():
        recipients.append(settings.AUDIT_EMAIL)
    return recipients


def _gmail_access_token(client: httpx.Client) -> str:
    response = client.post(
        GOOGLE_TOKEN_URL,
        data={
            "client_id": settings.GMAIL_CLIENT_ID,
            "client_secret": settings.GMAIL_CLIENT_SECRET,
            "refresh_token": settings.GMAIL_REFRESH_TOKEN,
            "grant_type": "refresh_token",
        },
    )
    response.raise_for_status()
    token = response.json().get("access_token")
    if not token:
        raise MailerError("Google token endpoint returned no access_token")
    return token


def send_via_gmail(recipients: List[str], subject: str, html: str) -> int:
    """Send one message per recipient; returns how many were accepted."""
    sent = 0
    with httpx.Client(timeout=settings.MAIL_TIMEOUT_SECONDS) as client:
        try:
            access_token = _gmail_access_token(client)
        except (httpx.HTTPError, MailerError) as e:
            logger.error(f"[MAILER] Failed to obtain Gmail access token: {e}")
            return 0

        headers = {"Authorization": f"Bearer {access_token}"}
        for recipient in recipients:
            raw = encode_for_gmail(build_message(recipient, subject, html))
            try:
                response = client.post(GMAIL_SEND_URL, json={"raw": raw}, headers=headers)
                response.raise_for_status()
                logger.info(f"[MAILER] Gmail accepted message {response.json().get('id')} for {recipient}")
                sent += 1
            except httpx.HTTPError as e:
                logger.error(f"[MAILER] Gmail API send failed for {recipient}: {e}")
    return sent


def send_via_smtp(recipients: List[str], subject: str, html: str) -> int:
    sent = 0
    try:
        if settings.SMTP_SECURE:
            server = smtplib.SMTP_SSL(
                settings.SMTP_HOST, settings.SMTP_PORT,
                timeout=settings.MAIL_TIMEOUT_SECONDS,
                context=ssl.create_default_context(),
            )
        else:
            server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.MAIL_TIMEOUT_SECONDS)
            server.ehlo()
            server.starttls(context=ssl.create_default_context())
        with server:
            server.login(settings.SMTP_USER, settings.SMTP_PASS)
            for recipient in recipients:
                try:
                    server.sendmail(settings.mail_sender, recipient, build_message(recipient, subject, html).as_string())
                    logger.info(f"[MAILER] SMTP sent to '{recipient}': {subject}")
                    sent += 1
                except smtplib.SMTPException as e:
                    logger.error(f"[MAILER] SMTP send failed for {recipient}: {e}")
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"[MAILER] SMTP connection to {settings.SMTP_HOST}:{settings.SMTP_PORT} failed: {e}")
    return sent


def send_otp_email(to: str, otp: str) -> bool:
    """
    Dispatch a password reset code.

    Returns True if at least one provider accepted the message for ``to``'s
    batch, False when nothing was sent. Never raises on delivery problems.
    """
    if not to:
        raise ValueError("Missing recipient for OTP email")

    subject = "Your OTP Code"
    html = (
        f"<p>OTP for <strong>{to}</strong>: <strong>{otp}</strong></p>"
        f"<p>This code expires in {settings.OTP_TTL_MINUTES} minutes.</p>"
    )
    recipients = otp_recipients(to)

    if settings.gmail_configured:
        return send_via_gmail(recipients, subject, html) > 0

    if settings.smtp_configured:
        return send_via_smtp(recipients, subject, html) > 0

    logger.warning(f"[MAILER] No email provider configured. OTP for {to}: {otp}")
    return False
