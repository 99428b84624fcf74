from __future__ import annotations

from jobboard.services.applications import StatusNotifier
from jobboard.tasks.notifications import QueuedNotifier


def get_status_notifier() -> StatusNotifier:
    """
    Per-request notifier; delivery runs as a Celery task (inline when no broker is configured).
    """
    return QueuedNotifier()
