from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse

from jobboard.core.config import settings
from jobboard.dependencies.auth import require_employee
from jobboard.models.user import User
from jobboard.schemas.application import UploadedResumeOut
from jobboard.services.uploads import content_type_for, enforce_max_upload_bytes, resolve_resume_path, save_resume

router = APIRouter(tags=["uploads"])


@router.post("/upload/resume", response_model=UploadedResumeOut)
def upload_resume(
    resume: UploadFile = File(...),
    user: User = Depends(require_employee),
):
    # Read one byte past the limit so oversize files are rejected without buffering them whole.
    data = resume.file.read(settings.MAX_UPLOAD_BYTES + 1)
    enforce_max_upload_bytes(len(data))
    return save_resume(data, resume.filename, resume.content_type)


@router.get("/uploads/resumes/{filename}")
def download_resume(filename: str):
    path = resolve_resume_path(filename)
    return FileResponse(
        path,
        media_type=content_type_for(path.name),
        filename=path.name,
        headers={"Cache-Control": "no-cache"},
    )
