from __future__ import annotations

import logging
from dataclasses import asdict

from jobboard.celery_app import celery_app, enqueue
from jobboard.services import notifications
from jobboard.services.applications import StatusChangeEvent


logger = logging.getLogger(__name__)


@celery_app.task(name="notifications.deliver_status_change", max_retries=3)
def deliver_status_change(event: dict) -> None:
    status_event = StatusChangeEvent(**event)
    try:
        notifications.EmailStatusNotifier().notify_status_change(status_event)
    except Exception:  # pylint: disable=broad-except
        logger.exception(
            "Status notification delivery failed: application_id=%s status=%s",
            status_event.application_id,
            status_event.status,
        )


@celery_app.task(name="notifications.send_welcome_email", max_retries=3)
def send_welcome_email(to_email: str, name: str, role: str) -> None:
    notifications.send_welcome_email(to_email, name, role)


class QueuedNotifier:
    """
    StatusNotifier that hands events to the task queue. Delivery errors stay in the task.
    """

    def notify_status_change(self, event: StatusChangeEvent) -> None:
        enqueue(deliver_status_change, asdict(event))
