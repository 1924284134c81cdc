from datetime import date
from typing import List, Optional

from app.core.exceptions import ValidationError, NotFoundError, NoActiveCycleError
from app.models.appraisal_cycle import AppraisalCycle, CycleStatus
from app.models.role import RoleCode
from app.services.audit import AuditService
from app.services.base import BaseService

HR_ROLES = [RoleCode.HR, RoleCode.ADMIN]


class CycleService(BaseService):
    """Appraisal cycle lifecycle. At most one cycle is active at any time."""

    def get_active_cycle_id(self) -> int:
        cycle = (
            self.db.query(AppraisalCycle)
            .filter(AppraisalCycle.status == CycleStatus.ACTIVE.value)
            .first()
        )
        if cycle is None:
            raise NoActiveCycleError()
        return cycle.id

    def list_cycles(self) -> List[AppraisalCycle]:
        return (
            self.db.query(AppraisalCycle)
            .order_by(AppraisalCycle.start_date.desc(), AppraisalCycle.id.desc())
            .all()
        )

    def create_cycle(
        self,
        name: Optional[str],
        start_date: Optional[date],
        end_date: Optional[date],
        actor_id: int,
    ) -> AppraisalCycle:
        if not name or not name.strip() or start_date is None or end_date is None:
            raise ValidationError("Missing cycle details.")
        if end_date < start_date:
            raise ValidationError("Cycle end date cannot be before its start date.")

        with self.atomic("create_cycle"):
            actor = self.require_role(actor_id, HR_ROLES)
            cycle = AppraisalCycle(
                name=name.strip(),
                start_date=start_date,
                end_date=end_date,
                status=CycleStatus.INACTIVE.value,
            )
            self.db.add(cycle)
            self.db.flush()
            AuditService.log(
                self.db,
                action="cycle_created",
                entity_type="appraisal_cycle",
                entity_id=cycle.id,
                user_id=actor.id,
                user_role=self.role_value(actor),
                details={"name": cycle.name, "start_date": start_date, "end_date": end_date},
            )
        self.log_info(f"Cycle {cycle.id} created by {actor_id}")
        return cycle

    def set_cycle_status(self, cycle_id: int, new_status: str, actor_id: int) -> AppraisalCycle:
        try:
            status = CycleStatus(new_status)
        except ValueError:
            raise ValidationError(
                "Invalid status value.",
                details={"allowed": [s.value for s in CycleStatus]},
            )

        with self.atomic("set_cycle_status"):
            actor = self.require_role(actor_id, HR_ROLES)
            cycle = self.db.get(AppraisalCycle, cycle_id)
            if cycle is None:
                raise NotFoundError("Cycle not found.")

            before = {"status": cycle.status}
            deactivated: List[int] = []
            if status == CycleStatus.ACTIVE:
                # Deactivate every other active cycle first, in the same transaction
                others = (
                    self.db.query(AppraisalCycle)
                    .filter(
                        AppraisalCycle.status == CycleStatus.ACTIVE.value,
                        AppraisalCycle.id != cycle_id,
                    )
                    .with_for_update()
                    .all()
                )
                for other in others:
                    other.status = CycleStatus.INACTIVE.value
                    deactivated.append(other.id)
                self.db.flush()

            cycle.status = status.value
            self.db.flush()

            AuditService.log(
                self.db,
                action="cycle_status_changed",
                entity_type="appraisal_cycle",
                entity_id=cycle.id,
                user_id=actor.id,
                user_role=self.role_value(actor),
                details={"deactivated_cycles": deactivated},
                before_state=before,
                after_state={"status": cycle.status},
            )
        self.log_info(f"Cycle {cycle_id} status set to {status.value}", deactivated=deactivated)
        return cycle
