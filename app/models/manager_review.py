from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class ManagerReview(Base):
    __tablename__ = "manager_reviews"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_manager_reviews_rating"),
    )

    id = Column(Integer, primary_key=True, index=True)
    goal_id = Column(Integer, ForeignKey("goals.id"), nullable=False, unique=True)
    manager_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    feedback = Column(Text, nullable=False)
    review_date = Column(DateTime(timezone=True), server_default=func.now())

    goal = relationship("Goal", back_populates="review")
