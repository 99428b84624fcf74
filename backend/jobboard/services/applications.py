"""
Application ledger: creation, status transitions, scoped reads and deletion of
job applications.

Authorization is always evaluated against the persisted application and job,
never against caller-supplied ownership claims. Denied and missing records
look the same to callers (a ``False`` result); the distinguishing reason is
only logged.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from jobboard.models.application import APPLICATION_STATUSES, Application
from jobboard.models.job import Job
from jobboard.models.user import User

logger = logging.getLogger(__name__)

# Status changes by the owning employer that the applicant is told about.
NOTIFY_STATUSES = frozenset({"shortlisted", "accepted", "rejected"})

Employer = aliased(User, name="employer")
Employee = aliased(User, name="employee")


class ApplicationError(Exception):
    pass


class DuplicateApplication(ApplicationError):
    def __init__(self, job_id: int, employee_id: int) -> None:
        super().__init__("You have already applied for this job")
        self.job_id = job_id
        self.employee_id = employee_id


class JobUnavailable(ApplicationError):
    def __init__(self, job_id: int) -> None:
        super().__init__("Job not found or no longer active")
        self.job_id = job_id


class InvalidStatus(ApplicationError, ValueError):
    def __init__(self, status: object) -> None:
        super().__init__(f"Invalid status: {status!r}. Allowed: {', '.join(APPLICATION_STATUSES)}")
        self.status = status


class AuthorizationDenied(ApplicationError):
    """
    Internal only. Logged with its reason, surfaced to callers as a plain False.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class NotificationDeliveryFailed(ApplicationError):
    pass


@dataclass(frozen=True)
class Actor:
    id: int
    role: str


@dataclass(frozen=True)
class Attachments:
    resume_filename: Optional[str] = None
    resume_url: Optional[str] = None
    resume_size: Optional[int] = None
    cover_letter: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None

    def as_columns(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class ApplicationView:
    id: int
    job_id: int
    employee_id: int
    status: str
    applied_at: datetime
    updated_at: datetime
    resume_filename: Optional[str]
    resume_url: Optional[str]
    resume_size: Optional[int]
    cover_letter: Optional[str]
    phone: Optional[str]
    location: Optional[str]
    job_title: str
    employer_id: int
    employer_name: Optional[str]
    employee_name: Optional[str]
    employee_email: Optional[str]


@dataclass
class ApplicationStats:
    total: int = 0
    applied: int = 0
    viewed: int = 0
    shortlisted: int = 0
    rejected: int = 0
    accepted: int = 0

    @classmethod
    def from_statuses(cls, statuses: Iterable[str]) -> "ApplicationStats":
        stats = cls()
        for s in statuses:
            stats.total += 1
            if s in APPLICATION_STATUSES:
                setattr(stats, s, getattr(stats, s) + 1)
        return stats


@dataclass(frozen=True)
class StatusChangeEvent:
    application_id: int
    status: str
    job_title: str
    employer_name: Optional[str]
    employee_email: Optional[str]
    employee_name: Optional[str]


class StatusNotifier(Protocol):
    def notify_status_change(self, event: StatusChangeEvent) -> None:
        ...


def normalize_status(raw: object) -> str:
    if not isinstance(raw, str):
        raise InvalidStatus(raw)
    if raw not in APPLICATION_STATUSES:
        raise InvalidStatus(raw)
    return raw


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _refreshed_timestamp(previous: datetime | None) -> datetime:
    # Never move updated_at backwards, even if the DB clock ran ahead of ours.
    now = _now_utc()
    if previous is None:
        return now
    if previous.tzinfo is None:
        previous = previous.replace(tzinfo=timezone.utc)
    return max(now, previous)


def _to_view(application: Application, job: Job, employer: User, employee: User) -> ApplicationView:
    return ApplicationView(
        id=application.id,
        job_id=application.job_id,
        employee_id=application.employee_id,
        status=application.status,
        applied_at=application.applied_at,
        updated_at=application.updated_at,
        resume_filename=application.resume_filename,
        resume_url=application.resume_url,
        resume_size=application.resume_size,
        cover_letter=application.cover_letter,
        phone=application.phone,
        location=application.location,
        job_title=job.title,
        employer_id=job.employer_id,
        employer_name=employer.name,
        employee_name=employee.name,
        employee_email=employee.email,
    )


class ApplicationLedger:
    def __init__(self, db: Session, notifier: StatusNotifier | None = None) -> None:
        self.db = db
        self.notifier = notifier

    # -----------------------------
    # Create
    # -----------------------------
    def apply(self, job_id: int, employee_id: int, attachments: Attachments | None = None) -> Application:
        if self._exists(job_id, employee_id):
            logger.info("Blocked duplicate application: job_id=%s employee_id=%s", job_id, employee_id)
            raise DuplicateApplication(job_id, employee_id)

        job = self.db.query(Job).filter(Job.id == job_id, Job.is_active.is_(True)).first()
        if not job:
            raise JobUnavailable(job_id)

        now = _now_utc()
        application = Application(
            job_id=job.id,
            employee_id=employee_id,
            status="applied",
            applied_at=now,
            updated_at=now,
            **(attachments or Attachments()).as_columns(),
        )
        self.db.add(application)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # The unique constraint is the real guard when two applies race.
            self.db.rollback()
            if self._exists(job_id, employee_id):
                logger.info("Duplicate application rejected by constraint: job_id=%s employee_id=%s", job_id, employee_id)
                raise DuplicateApplication(job_id, employee_id) from exc
            raise

        self.db.refresh(application)
        logger.info(
            "Application created: id=%s job_id=%s employee_id=%s",
            application.id,
            application.job_id,
            application.employee_id,
        )
        return application

    # -----------------------------
    # Transition
    # -----------------------------
    def update_status(self, application_id: int, new_status: str, actor: Actor) -> bool:
        status = normalize_status(new_status)

        row = (
            self.db.query(Application, Job)
            .join(Job, Application.job_id == Job.id)
            .filter(Application.id == application_id)
            .with_for_update(of=Application)
            .first()
        )
        if row is None:
            self._log_refusal("status update", application_id, actor, "not_found")
            return False

        application, job = row
        try:
            self._authorize_transition(application, job, actor)
        except AuthorizationDenied as e:
            self.db.rollback()
            self._log_refusal("status update", application_id, actor, e.reason)
            return False

        event = None
        if actor.role == "employer" and status in NOTIFY_STATUSES:
            event = self._build_event(application, job, status)

        previous = application.status
        application.status = status
        application.updated_at = _refreshed_timestamp(application.updated_at)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Application status changed: id=%s from=%s to=%s by=%s:%s",
            application_id,
            previous,
            status,
            actor.role,
            actor.id,
        )

        if event is not None:
            self._dispatch(event)
        return True

    def _authorize_transition(self, application: Application, job: Job, actor: Actor) -> None:
        if actor.role == "employer":
            if job.employer_id != actor.id:
                raise AuthorizationDenied("employer_does_not_own_job")
            return
        if actor.role == "employee":
            if application.employee_id != actor.id:
                raise AuthorizationDenied("employee_does_not_own_application")
            return
        raise AuthorizationDenied(f"unsupported_role:{actor.role}")

    def _build_event(self, application: Application, job: Job, status: str) -> StatusChangeEvent:
        employer = self.db.get(User, job.employer_id)
        employee = self.db.get(User, application.employee_id)
        return StatusChangeEvent(
            application_id=application.id,
            status=status,
            job_title=job.title,
            employer_name=getattr(employer, "name", None),
            employee_email=getattr(employee, "email", None),
            employee_name=getattr(employee, "name", None),
        )

    def _dispatch(self, event: StatusChangeEvent) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify_status_change(event)
        except Exception:
            # The status change is already committed; delivery problems stop here.
            logger.exception(
                "Status notification failed: application_id=%s status=%s",
                event.application_id,
                event.status,
            )

    # -----------------------------
    # Read
    # -----------------------------
    def _view_query(self):
        return (
            self.db.query(Application, Job, Employer, Employee)
            .join(Job, Application.job_id == Job.id)
            .join(Employer, Job.employer_id == Employer.id)
            .join(Employee, Application.employee_id == Employee.id)
        )

    def list_for_employee(self, employee_id: int) -> tuple[list[ApplicationView], ApplicationStats]:
        rows = (
            self._view_query()
            .filter(Application.employee_id == employee_id)
            .order_by(Application.applied_at.desc(), Application.id.desc())
            .all()
        )
        views = [_to_view(*r) for r in rows]
        return views, ApplicationStats.from_statuses(v.status for v in views)

    def list_for_employer(self, employer_id: int) -> list[ApplicationView]:
        rows = (
            self._view_query()
            .filter(Job.employer_id == employer_id)
            .order_by(Application.applied_at.desc(), Application.id.desc())
            .all()
        )
        views: list[ApplicationView] = []
        for r in rows:
            view = _to_view(*r)
            if view.employer_id != employer_id:
                logger.error(
                    "Dropped foreign application from employer listing: id=%s job_owner=%s caller=%s",
                    view.id,
                    view.employer_id,
                    employer_id,
                )
                continue
            views.append(view)
        return views

    def get_by_id(self, application_id: int) -> ApplicationView | None:
        row = self._view_query().filter(Application.id == application_id).first()
        return _to_view(*row) if row else None

    def get_for_actor(self, application_id: int, actor: Actor) -> ApplicationView | None:
        """
        Applicant or owning employer only; anyone else gets None, same as a missing id.
        """
        view = self.get_by_id(application_id)
        if view is None:
            return None
        if actor.role == "employer" and view.employer_id == actor.id:
            return view
        if actor.role == "employee" and view.employee_id == actor.id:
            return view
        self._log_refusal("read", application_id, actor, "not_owner")
        return None

    # -----------------------------
    # Delete
    # -----------------------------
    def delete(self, application_id: int, employer_id: int) -> bool:
        row = (
            self.db.query(Application, Job)
            .join(Job, Application.job_id == Job.id)
            .filter(Application.id == application_id)
            .first()
        )
        actor = Actor(id=employer_id, role="employer")
        if row is None:
            self._log_refusal("delete", application_id, actor, "not_found")
            return False

        application, job = row
        if job.employer_id != employer_id:
            self._log_refusal("delete", application_id, actor, "employer_does_not_own_job")
            return False

        self.db.delete(application)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Application deleted: id=%s job_id=%s by employer=%s", application_id, job.id, employer_id)
        return True

    # -----------------------------
    # Helpers
    # -----------------------------
    def _exists(self, job_id: int, employee_id: int) -> bool:
        return (
            self.db.query(Application.id)
            .filter(Application.job_id == job_id, Application.employee_id == employee_id)
            .first()
            is not None
        )

    @staticmethod
    def _log_refusal(action: str, application_id: int, actor: Actor, reason: str) -> None:
        logger.info(
            "Application %s refused: id=%s actor=%s:%s reason=%s",
            action,
            application_id,
            actor.role,
            actor.id,
            reason,
        )
