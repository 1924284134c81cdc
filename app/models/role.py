from sqlalchemy import Column, Integer, String, Enum
from sqlalchemy.orm import relationship
import enum
from app.database import Base


class RoleCode(str, enum.Enum):
    """
    Roles known to the appraisal workflow.

    - ADMIN: System administration
    - HR: Runs appraisal cycles and finalizes ratings
    - MANAGER: Approves goals and reviews direct reports
    - EMPLOYEE: Sets goals, self-appraises, gives peer feedback
    """
    ADMIN = "ADMIN"
    HR = "HR"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(Enum(RoleCode), unique=True, nullable=False)
    name = Column(String, unique=True, nullable=False)

    employees = relationship("Employee", back_populates="role")

    def __repr__(self):
        return f"<Role {self.code.value}: {self.name}>"
