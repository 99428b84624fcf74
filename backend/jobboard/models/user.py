# jobboard/models/user.py
from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from jobboard.core.base import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('employer', 'employee')", name="ck_users_role"),
    )

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    # employer | employee
    role = Column(String(20), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # employer → posted jobs
    jobs = relationship("Job", back_populates="employer")

    # employee → submitted applications
    applications = relationship("Application", back_populates="employee")

    @property
    def is_employer(self) -> bool:
        return self.role == "employer"

    @property
    def is_employee(self) -> bool:
        return self.role == "employee"
