from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session, joinedload

from jobboard.models.application import Application
from jobboard.models.job import Job

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "requirements", "location", "salary")


class JobError(Exception):
    pass


class JobNotFound(JobError):
    def __init__(self, job_id: int) -> None:
        super().__init__("Job not found or access denied")
        self.job_id = job_id


class JobHasApplications(JobError):
    def __init__(self, job_id: int, count: int) -> None:
        super().__init__(
            f"Cannot delete job because it has {count} application(s). "
            "Please delete applications first or deactivate the job instead."
        )
        self.job_id = job_id
        self.count = count


def clean_job_fields(data: dict[str, Any]) -> dict[str, Any]:
    """
    Keep only known, present fields; trim strings.
    """
    out: dict[str, Any] = {}
    for k, v in data.items():
        if k not in UPDATABLE_FIELDS or v is None:
            continue
        out[k] = v.strip() if isinstance(v, str) else v
    return out


class JobDirectory:
    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, employer_id: int, data: dict[str, Any]) -> Job:
        job = Job(employer_id=employer_id, is_active=True, **clean_job_fields(data))
        self.db.add(job)
        self.db.commit()
        self.db.refresh(job)
        logger.info("Job created: id=%s employer_id=%s", job.id, employer_id)
        return job

    def list_active(self) -> list[Job]:
        return (
            self.db.query(Job)
            .options(joinedload(Job.employer))
            .filter(Job.is_active.is_(True))
            .order_by(Job.created_at.desc(), Job.id.desc())
            .all()
        )

    def list_for_employer(self, employer_id: int) -> list[Job]:
        return (
            self.db.query(Job)
            .options(joinedload(Job.employer))
            .filter(Job.employer_id == employer_id)
            .order_by(Job.created_at.desc(), Job.id.desc())
            .all()
        )

    def get_active(self, job_id: int) -> Job | None:
        return (
            self.db.query(Job)
            .options(joinedload(Job.employer))
            .filter(Job.id == job_id, Job.is_active.is_(True))
            .first()
        )

    def get_owned(self, job_id: int, employer_id: int) -> Job:
        job = (
            self.db.query(Job)
            .filter(Job.id == job_id, Job.employer_id == employer_id)
            .first()
        )
        if not job:
            raise JobNotFound(job_id)
        return job

    def update(self, job_id: int, employer_id: int, changes: dict[str, Any]) -> Job:
        """
        Partial update: only keys present in `changes` are written.
        """
        job = self.get_owned(job_id, employer_id)
        for k, v in clean_job_fields(changes).items():
            setattr(job, k, v)
        self.db.commit()
        self.db.refresh(job)
        return job

    def set_active(self, job_id: int, employer_id: int, is_active: bool | None = None) -> Job:
        """
        Activate/deactivate regardless of existing applications. None toggles.
        """
        job = self.get_owned(job_id, employer_id)
        job.is_active = (not job.is_active) if is_active is None else bool(is_active)
        self.db.commit()
        self.db.refresh(job)
        logger.info("Job %s: id=%s employer_id=%s", "activated" if job.is_active else "deactivated", job.id, employer_id)
        return job

    def count_applications(self, job_id: int) -> int:
        return self.db.query(Application).filter(Application.job_id == job_id).count()

    def delete(self, job_id: int, employer_id: int) -> None:
        job = self.get_owned(job_id, employer_id)

        count = self.count_applications(job.id)
        if count:
            logger.info("Job delete blocked: id=%s applications=%s", job.id, count)
            raise JobHasApplications(job.id, count)

        self.db.delete(job)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Job deleted: id=%s employer_id=%s", job_id, employer_id)
