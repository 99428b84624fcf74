from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from jobboard.core.base import Base

APPLICATION_STATUSES = ("applied", "viewed", "shortlisted", "rejected", "accepted")


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "employee_id", name="uq_applications_job_id_employee_id"),
        CheckConstraint(
            "status IN ('applied', 'viewed', 'shortlisted', 'rejected', 'accepted')",
            name="ck_applications_status",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    # ownership (never updated after insert)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String(50), nullable=False, default="applied", server_default="applied")

    applied_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Attachments are written once at apply time.
    resume_filename = Column(String(255), nullable=True)
    resume_url = Column(String(500), nullable=True)
    resume_size = Column(Integer, nullable=True)
    cover_letter = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    location = Column(String(255), nullable=True)

    job = relationship("Job", back_populates="applications")
    employee = relationship("User", back_populates="applications")
