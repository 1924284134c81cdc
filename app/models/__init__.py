# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    role, department, employee, appraisal_cycle, goal,
    self_appraisal, manager_review, feedback_360, final_rating, audit_log
)

# Explicit class exports for cleaner imports
from .role import Role, RoleCode
from .department import Department
from .employee import Employee
from .appraisal_cycle import AppraisalCycle, CycleStatus
from .goal import Goal, GoalStatus
from .self_appraisal import SelfAppraisal
from .manager_review import ManagerReview
from .feedback_360 import Feedback360
from .final_rating import FinalRating
from .audit_log import AuditLog

__all__ = [
    "Role",
    "RoleCode",
    "Department",
    "Employee",
    "AppraisalCycle",
    "CycleStatus",
    "Goal",
    "GoalStatus",
    "SelfAppraisal",
    "ManagerReview",
    "Feedback360",
    "FinalRating",
    "AuditLog",
]
