from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from jobboard.core.database import get_db
from jobboard.dependencies.auth import actor_for, get_current_user, require_employee, require_employer
from jobboard.dependencies.notifications import get_status_notifier
from jobboard.models.user import User
from jobboard.schemas.application import (
    ApplicationDetailOut,
    ApplicationOut,
    ApplicationStatsOut,
    ApplyIn,
    EmployeeApplicationsOut,
    StatusUpdateIn,
)
from jobboard.schemas.auth import MessageOut
from jobboard.services.applications import (
    ApplicationLedger,
    Attachments,
    DuplicateApplication,
    InvalidStatus,
    JobUnavailable,
    StatusNotifier,
)
from jobboard.services.uploads import RESUME_URL_PREFIX

router = APIRouter(tags=["applications"])

NOT_FOUND_OR_DENIED = "Application not found or access denied"


def _attachments(payload: ApplyIn) -> Attachments:
    resume = payload.resume
    return Attachments(
        resume_filename=resume.filename if resume else None,
        resume_url=(resume.url or f"{RESUME_URL_PREFIX}/{resume.filename}") if resume else None,
        resume_size=resume.size if resume else None,
        cover_letter=payload.cover_letter,
        phone=payload.phone,
        location=payload.location,
    )


@router.post("/applications/apply", response_model=ApplicationOut, status_code=status.HTTP_201_CREATED)
def apply_for_job(
    payload: ApplyIn,
    db: Session = Depends(get_db),
    user: User = Depends(require_employee),
):
    ledger = ApplicationLedger(db)
    try:
        return ledger.apply(payload.job_id, user.id, _attachments(payload))
    except DuplicateApplication as e:
        raise HTTPException(status_code=409, detail=str(e))
    except JobUnavailable as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/employee/applications", response_model=EmployeeApplicationsOut)
def list_my_applications(
    db: Session = Depends(get_db),
    user: User = Depends(require_employee),
):
    views, stats = ApplicationLedger(db).list_for_employee(user.id)
    return EmployeeApplicationsOut(
        applications=[ApplicationDetailOut.model_validate(v) for v in views],
        stats=ApplicationStatsOut.model_validate(stats),
    )


@router.get("/employer/applications", response_model=list[ApplicationDetailOut])
def list_applications_for_my_jobs(
    db: Session = Depends(get_db),
    user: User = Depends(require_employer),
):
    views = ApplicationLedger(db).list_for_employer(user.id)
    return [ApplicationDetailOut.model_validate(v) for v in views]


@router.get("/applications/{application_id}", response_model=ApplicationDetailOut)
def get_application(
    application_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    view = ApplicationLedger(db).get_for_actor(application_id, actor_for(user))
    if view is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_OR_DENIED)
    return ApplicationDetailOut.model_validate(view)


@router.patch("/applications/{application_id}/status", response_model=MessageOut)
def update_application_status(
    application_id: int,
    payload: StatusUpdateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    notifier: StatusNotifier = Depends(get_status_notifier),
):
    ledger = ApplicationLedger(db, notifier=notifier)
    try:
        updated = ledger.update_status(application_id, payload.status, actor_for(user))
    except InvalidStatus as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not updated:
        raise HTTPException(status_code=404, detail=NOT_FOUND_OR_DENIED)
    return {"message": "Application status updated successfully"}


@router.delete("/applications/{application_id}", response_model=MessageOut)
def delete_application(
    application_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_employer),
):
    if not ApplicationLedger(db).delete(application_id, user.id):
        raise HTTPException(status_code=404, detail=NOT_FOUND_OR_DENIED)
    return {"message": "Application deleted successfully"}
