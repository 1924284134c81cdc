from sqlalchemy import Column, Integer, String, Date, DateTime, Index, text
from sqlalchemy.sql import func
from app.database import Base
import enum


class CycleStatus(str, enum.Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    CLOSED = "closed"


class AppraisalCycle(Base):
    __tablename__ = "appraisal_cycles"
    __table_args__ = (
        # At most one active cycle, enforced by the database as well
        Index(
            "uq_appraisal_cycles_single_active",
            "status",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String, default=CycleStatus.INACTIVE.value, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<AppraisalCycle {self.id}: {self.name} [{self.status}]>"
