from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ApplicationStatus = Literal["applied", "viewed", "shortlisted", "rejected", "accepted"]


class ResumeIn(BaseModel):
    filename: str = Field(min_length=1, max_length=255)
    original_name: Optional[str] = Field(default=None, max_length=255)
    url: Optional[str] = Field(default=None, max_length=500)
    size: Optional[int] = Field(default=None, ge=0)


class ApplyIn(BaseModel):
    job_id: int
    resume: Optional[ResumeIn] = None
    cover_letter: Optional[str] = Field(default=None, max_length=10000)
    phone: Optional[str] = Field(default=None, max_length=50)
    location: Optional[str] = Field(default=None, max_length=255)


class StatusUpdateIn(BaseModel):
    status: ApplicationStatus


class ApplicationOut(BaseModel):
    id: int
    job_id: int
    employee_id: int
    status: ApplicationStatus
    applied_at: datetime
    updated_at: datetime
    resume_filename: Optional[str] = None
    resume_url: Optional[str] = None
    resume_size: Optional[int] = None
    cover_letter: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ApplicationDetailOut(ApplicationOut):
    job_title: str
    employer_id: int
    employer_name: Optional[str] = None
    employee_name: Optional[str] = None
    employee_email: Optional[str] = None


class ApplicationStatsOut(BaseModel):
    total: int
    applied: int
    viewed: int
    shortlisted: int
    rejected: int
    accepted: int

    model_config = ConfigDict(from_attributes=True)


class EmployeeApplicationsOut(BaseModel):
    applications: List[ApplicationDetailOut]
    stats: ApplicationStatsOut


class UploadedResumeOut(BaseModel):
    filename: str
    original_name: str
    url: str
    size: int

    model_config = ConfigDict(from_attributes=True)
