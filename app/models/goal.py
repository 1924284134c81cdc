from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import enum


class GoalStatus(str, enum.Enum):
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (
        CheckConstraint("weightage > 0 AND weightage <= 100", name="ck_goals_weightage_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    cycle_id = Column(Integer, ForeignKey("appraisal_cycles.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    weightage = Column(Numeric(5, 2), nullable=False)
    status = Column(String, default=GoalStatus.PENDING_APPROVAL.value, nullable=False, index=True)

    # Approval step
    approved_by = Column(Integer, ForeignKey("employees.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approval_feedback = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee", foreign_keys=[employee_id], back_populates="goals")
    cycle = relationship("AppraisalCycle")
    self_appraisals = relationship("SelfAppraisal", back_populates="goal", cascade="all, delete-orphan")
    review = relationship("ManagerReview", back_populates="goal", uselist=False, cascade="all, delete-orphan")
