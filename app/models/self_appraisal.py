from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class SelfAppraisal(Base):
    __tablename__ = "self_appraisals"

    id = Column(Integer, primary_key=True, index=True)
    goal_id = Column(Integer, ForeignKey("goals.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    comments = Column(Text, nullable=False)
    document_link = Column(String, nullable=True)
    submission_date = Column(DateTime(timezone=True), server_default=func.now())

    goal = relationship("Goal", back_populates="self_appraisals")
