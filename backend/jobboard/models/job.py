from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from jobboard.core.base import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)

    # ownership
    employer_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    requirements = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    salary = Column(String(100), nullable=True)

    # Inactive jobs are hidden from the public listing and closed to new applications.
    is_active = Column(Boolean, nullable=False, default=True, server_default="true")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    employer = relationship("User", back_populates="jobs")

    # No cascade: a job with applications must not be hard-deleted.
    applications = relationship("Application", back_populates="job", passive_deletes="all")

    @property
    def employer_name(self) -> str | None:
        employer = getattr(self, "employer", None)
        return getattr(employer, "name", None)
