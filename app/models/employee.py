"""
Employee Model.
An employee is also the login principal; the reporting line is a self-reference.
"""
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.role import RoleCode


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)

    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True)

    # Weak back-reference: the employee can change it without the manager's consent
    manager_id = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    role = relationship("Role", back_populates="employees")
    department = relationship("Department", back_populates="employees")
    manager = relationship("Employee", remote_side=[id], back_populates="direct_reports")
    direct_reports = relationship("Employee", back_populates="manager")
    goals = relationship("Goal", foreign_keys="Goal.employee_id", back_populates="employee", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Employee {self.email} ({self.role_code})>"

    @property
    def role_code(self) -> RoleCode | None:
        return self.role.code if self.role else None
