from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from jobboard.core.database import get_db
from jobboard.dependencies.auth import require_employer
from jobboard.models.user import User
from jobboard.schemas.auth import MessageOut
from jobboard.schemas.job import JobCreate, JobOut, JobStatusIn, JobUpdate
from jobboard.services.jobs import JobDirectory, JobHasApplications, JobNotFound

router = APIRouter(tags=["jobs"])


def _not_found(e: JobNotFound) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


# -----------------------------
# Public
# -----------------------------
@router.get("/jobs", response_model=list[JobOut])
def list_jobs(db: Session = Depends(get_db)):
    return JobDirectory(db).list_active()


@router.get("/jobs/{job_id}", response_model=JobOut)
def get_job(job_id: int, db: Session = Depends(get_db)):
    job = JobDirectory(db).get_active(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


# -----------------------------
# Employer
# -----------------------------
@router.post("/jobs", response_model=JobOut, status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_employer),
):
    return JobDirectory(db).create(user.id, payload.model_dump())


@router.get("/employer/jobs", response_model=list[JobOut])
def list_my_jobs(
    db: Session = Depends(get_db),
    user: User = Depends(require_employer),
):
    return JobDirectory(db).list_for_employer(user.id)


@router.patch("/jobs/{job_id}", response_model=JobOut)
def update_job(
    job_id: int,
    payload: JobUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_employer),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="At least one field must be provided for update")

    try:
        return JobDirectory(db).update(job_id, user.id, changes)
    except JobNotFound as e:
        raise _not_found(e)


@router.patch("/jobs/{job_id}/status", response_model=JobOut)
def set_job_status(
    job_id: int,
    payload: JobStatusIn,
    db: Session = Depends(get_db),
    user: User = Depends(require_employer),
):
    try:
        return JobDirectory(db).set_active(job_id, user.id, payload.is_active)
    except JobNotFound as e:
        raise _not_found(e)


@router.delete("/jobs/{job_id}", response_model=MessageOut)
def delete_job(
    job_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_employer),
):
    try:
        JobDirectory(db).delete(job_id, user.id)
    except JobNotFound as e:
        raise _not_found(e)
    except JobHasApplications as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "details": {"application_count": e.count}},
        )
    return {"message": "Job deleted permanently"}
