from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class Feedback360(Base):
    __tablename__ = "feedback_360"
    __table_args__ = (
        UniqueConstraint("employee_id", "reviewer_id", "cycle_id", name="uq_feedback_360_reviewer_cycle"),
        CheckConstraint("employee_id <> reviewer_id", name="ck_feedback_360_not_self"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_feedback_360_rating"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)  # subject
    reviewer_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    cycle_id = Column(Integer, ForeignKey("appraisal_cycles.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comments = Column(Text, nullable=False)
    feedback_date = Column(DateTime(timezone=True), server_default=func.now())

    reviewer = relationship("Employee", foreign_keys=[reviewer_id])
