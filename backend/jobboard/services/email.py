from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate
from html import escape as html_escape

import boto3
import resend
from botocore.exceptions import BotoCoreError, ClientError, EndpointConnectionError, NoCredentialsError

from jobboard.core.config import settings

logger = logging.getLogger(__name__)


class EmailNotConfiguredError(RuntimeError):
    pass


class EmailDeliveryError(RuntimeError):
    """
    Raised when a provider is configured but delivery fails.
    """


def _normalize_provider(raw: str | None) -> str:
    """
    Supported providers:
    - resend (default when unset)
    - ses
    - gmail
    Legacy alias:
    - smtp -> gmail
    """
    provider = (raw or "").strip().lower()
    if not provider:
        return "resend"
    if provider == "smtp":
        return "gmail"
    if provider in {"resend", "ses", "gmail"}:
        return provider
    raise EmailNotConfiguredError(
        f"Unsupported EMAIL_PROVIDER={provider!r}. Supported: resend (default), ses, gmail. Legacy alias: smtp -> gmail."
    )


def _require_from_email() -> str:
    if not settings.FROM_EMAIL:
        raise EmailNotConfiguredError("FROM_EMAIL is not set")
    return settings.FROM_EMAIL


def _require_smtp_config() -> str:
    if not settings.SMTP_HOST:
        raise EmailNotConfiguredError("SMTP_HOST is not set")
    from_email = settings.SMTP_FROM_EMAIL or settings.SMTP_USERNAME
    if not from_email:
        raise EmailNotConfiguredError("SMTP_FROM_EMAIL is not set")
    return from_email


def _require_ses_config() -> tuple[str, str]:
    region = (settings.AWS_REGION or "").strip()
    if not region:
        raise EmailNotConfiguredError("AWS_REGION is not set (required for SES)")
    return region, _require_from_email()


def _require_resend_config() -> tuple[str, str]:
    api_key = (settings.RESEND_API_KEY or "").strip()
    if not api_key:
        raise EmailNotConfiguredError("RESEND_API_KEY is not set")
    return api_key, _require_from_email()


def _send_email_ses(to_email: str, subject: str, body: str, html: str) -> str | None:
    region, from_email = _require_ses_config()
    client = boto3.client("ses", region_name=region)

    try:
        res = client.send_email(
            Source=from_email,
            Destination={"ToAddresses": [to_email]},
            Message={
                "Subject": {"Data": subject, "Charset": "UTF-8"},
                "Body": {
                    "Text": {"Data": body, "Charset": "UTF-8"},
                    "Html": {"Data": html, "Charset": "UTF-8"},
                },
            },
        )
        msg_id = res.get("MessageId")
        logger.info("SES email sent: to=%s msg_id=%s", to_email, msg_id)
        return msg_id
    except NoCredentialsError as e:
        logger.exception("SES email failed (no AWS credentials)")
        raise EmailDeliveryError("SES email failed: AWS credentials not available") from e
    except EndpointConnectionError as e:
        logger.exception("SES email failed (endpoint connection)")
        raise EmailDeliveryError("SES email failed: could not connect to SES endpoint") from e
    except ClientError as e:
        logger.exception("SES email failed (client error)")
        code = (e.response or {}).get("Error", {}).get("Code", "ClientError")
        raise EmailDeliveryError(f"SES email failed: {code}") from e
    except BotoCoreError as e:
        logger.exception("SES email failed (botocore)")
        raise EmailDeliveryError("SES email failed") from e


def _send_email_resend(to_email: str, subject: str, body: str, html: str) -> str | None:
    api_key, from_email = _require_resend_config()

    payload = {
        "from": from_email,
        "to": [to_email],
        "subject": subject,
        "text": body,
        "html": html,
    }

    try:
        resend.api_key = api_key
        res = resend.Emails.send(payload)  # type: ignore[attr-defined]
    except Exception as e:  # noqa: BLE001
        raise EmailDeliveryError(f"Resend send failed: {e}") from e

    msg_id: str | None = None
    if isinstance(res, dict):
        if res.get("error"):
            raise EmailDeliveryError(f"Resend API error: {res.get('error')}")
        v = res.get("id")
        if isinstance(v, str) and v.strip():
            msg_id = v.strip()

    logger.info("Resend email sent: to=%s msg_id=%s", to_email, msg_id)
    return msg_id


def _send_email_smtp(to_email: str, subject: str, body: str, html: str) -> None:
    from_email = _require_smtp_config()

    msg = MIMEMultipart("alternative")
    msg["From"] = from_email
    msg["To"] = to_email
    msg["Subject"] = subject
    msg["Date"] = formatdate(localtime=True)
    msg.attach(MIMEText(body, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))

    try:
        if settings.SMTP_USE_SSL:
            server: smtplib.SMTP = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10)
        else:
            server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10)
    except OSError as e:
        raise EmailDeliveryError(f"SMTP connection failed: {e}") from e

    try:
        server.ehlo()
        if settings.SMTP_USE_TLS and not settings.SMTP_USE_SSL:
            server.starttls()
            server.ehlo()

        if settings.SMTP_USERNAME:
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)

        server.sendmail(from_email, [to_email], msg.as_string())
    except smtplib.SMTPException as e:
        raise EmailDeliveryError(f"SMTP send failed: {e}") from e
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            pass

    logger.info("SMTP email sent: to=%s", to_email)


def send_email(to_email: str, subject: str, body: str, html: str | None = None) -> str | None:
    """
    Sends email using configured provider.
    - EMAIL_ENABLED=false: no-op, returns None
    - EMAIL_PROVIDER=resend (default): Resend API
    - EMAIL_PROVIDER=ses: AWS SES via boto3
    - EMAIL_PROVIDER=gmail: SMTP via stdlib
    - EMAIL_PROVIDER=smtp: legacy alias for gmail
    """
    if not settings.EMAIL_ENABLED:
        logger.info("Email disabled; skipping send to=%s subject=%r", to_email, subject)
        return None

    provider = _normalize_provider(settings.EMAIL_PROVIDER)
    html = html or f"<pre>{html_escape(body)}</pre>"
    if provider == "gmail":
        _send_email_smtp(to_email=to_email, subject=subject, body=body, html=html)
        return None
    if provider == "ses":
        return _send_email_ses(to_email=to_email, subject=subject, body=body, html=html)
    return _send_email_resend(to_email=to_email, subject=subject, body=body, html=html)
