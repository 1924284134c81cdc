from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class FinalRating(Base):
    __tablename__ = "final_ratings"
    __table_args__ = (
        UniqueConstraint("employee_id", "cycle_id", name="uq_final_ratings_employee_cycle"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    cycle_id = Column(Integer, ForeignKey("appraisal_cycles.id"), nullable=False, index=True)
    weighted_score = Column(Numeric(5, 2), nullable=False, default=0)
    final_rank = Column(String, nullable=True)  # "Exceeds Expectations", "Meets Expectations", ...
    final_comments = Column(Text, nullable=True)
    calculated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee")
