from __future__ import annotations

import logging
from html import escape as html_escape

from jobboard.core.config import settings
from jobboard.services.applications import NotificationDeliveryFailed, StatusChangeEvent
from jobboard.services.email import EmailDeliveryError, EmailNotConfiguredError, send_email

logger = logging.getLogger(__name__)

_STATUS_HEADLINES = {
    "shortlisted": "Good news: you've been shortlisted",
    "accepted": "Congratulations: your application was accepted",
    "rejected": "An update on your application",
}


def render_status_email(event: StatusChangeEvent) -> tuple[str, str, str]:
    """
    Returns (subject, text body, html body).
    """
    headline = _STATUS_HEADLINES.get(event.status, "Your application status changed")
    employer = event.employer_name or "the employer"
    greeting = f"Hello {event.employee_name}," if event.employee_name else "Hello,"
    dashboard = f"{settings.FRONTEND_BASE_URL}/dashboard"

    subject = f"{headline} - {event.job_title}"
    body = "\n".join(
        [
            greeting,
            "",
            f"Your application for {event.job_title} at {employer} is now: {event.status.upper()}.",
            "",
            f"See the details on your dashboard: {dashboard}",
            "",
            "Best regards,",
            "The Nexus Jobs Team",
        ]
    )
    html = f"""
    <html>
      <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
        <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
          <h2 style="color: #2563eb;">{html_escape(headline)}</h2>
          <p>{html_escape(greeting)}</p>
          <p>
            Your application for <strong>{html_escape(event.job_title)}</strong> at
            {html_escape(employer)} is now <strong>{html_escape(event.status)}</strong>.
          </p>
          <p><a href="{html_escape(dashboard)}">Go to Dashboard</a></p>
          <p>Best regards,<br>The Nexus Jobs Team</p>
        </div>
      </body>
    </html>
    """.strip()
    return subject, body, html


def render_welcome_email(name: str, role: str) -> tuple[str, str]:
    if role == "employer":
        subject = "Welcome to Nexus Jobs - Find the Best Talent!"
        next_steps = "Start posting jobs and finding the perfect candidates for your team!"
    else:
        subject = "Welcome to Nexus Jobs - Find Your Dream Job!"
        next_steps = "Start browsing job opportunities and take the next step in your career!"

    body = "\n".join(
        [
            f"Hello {name}!",
            "",
            f"Thank you for registering as an {role} on Nexus Jobs.",
            next_steps,
            "",
            f"Go to your dashboard: {settings.FRONTEND_BASE_URL}/dashboard",
            "",
            "Best regards,",
            "The Nexus Jobs Team",
        ]
    )
    return subject, body


class EmailStatusNotifier:
    """
    Delivers status-change events to the applicant by email.
    """

    def notify_status_change(self, event: StatusChangeEvent) -> None:
        if not event.employee_email:
            raise NotificationDeliveryFailed(f"No recipient for application {event.application_id}")

        subject, body, html = render_status_email(event)
        try:
            msg_id = send_email(to_email=event.employee_email, subject=subject, body=body, html=html)
        except (EmailNotConfiguredError, EmailDeliveryError) as e:
            raise NotificationDeliveryFailed(str(e)) from e
        logger.info(
            "Status email sent: application_id=%s status=%s msg_id=%s",
            event.application_id,
            event.status,
            msg_id,
        )


def send_welcome_email(to_email: str, name: str, role: str) -> None:
    """
    Registration must not fail because of email; errors are logged only.
    """
    subject, body = render_welcome_email(name, role)
    try:
        msg_id = send_email(to_email=to_email, subject=subject, body=body)
    except (EmailNotConfiguredError, EmailDeliveryError):
        logger.exception("Welcome email failed: to=%s", to_email)
        return
    logger.info("Welcome email sent: to=%s provider=%s msg_id=%s", to_email, settings.EMAIL_PROVIDER, msg_id)
