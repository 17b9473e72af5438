from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from app.core.base import Base


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    ON_HOLD = "ON_HOLD"

    def __str__(self) -> str:
        return self.value

    @property
    def display(self) -> str:
        return self.value.lower()


class Application(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)

    job_id = Column(
        Integer,
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # PENDING | ACCEPTED | REJECTED | ON_HOLD
    status = Column(String(20), nullable=False, server_default=ApplicationStatus.PENDING.value, index=True)

    # {question_id: answer_text}
    answers = Column(JSON, nullable=True)

    # Object-store keys; URLs are presigned on read.
    resume_key = Column(String(512), nullable=True)
    resume_preview_key = Column(String(512), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    user = relationship("User", back_populates="applications")
    job = relationship("Job", back_populates="applications")

    notes = relationship(
        "ApplicationNote",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="desc(ApplicationNote.created_at)",
    )

    action_logs = relationship(
        "ActionLog",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="desc(ActionLog.created_at)",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "job_id", name="uq_applications_user_id_job_id"),
    )
