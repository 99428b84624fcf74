from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class JobCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    requirements: str = Field(min_length=1)
    location: str = Field(min_length=1, max_length=255)
    salary: str = Field(min_length=1, max_length=100)


class JobUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    requirements: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=255)
    salary: Optional[str] = Field(default=None, max_length=100)


class JobStatusIn(BaseModel):
    # Omitted -> toggle.
    is_active: Optional[bool] = None


class JobOut(BaseModel):
    id: int
    employer_id: int
    employer_name: Optional[str] = None
    title: str
    description: Optional[str]
    requirements: Optional[str]
    location: Optional[str]
    salary: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class JobDeleteBlockedDetails(BaseModel):
    application_count: int
