from app.services.base import BaseService
from app.models.audit_log import AuditLog
from typing import Any, Optional

class AuditService(BaseService):
    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        user_id: Optional[int],
        user_role: Optional[str],
        details: dict,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None
    ):
        """
        Create an audit log entry for an explicitly named actor.
        Strictly append-only.

        The row is flushed into the caller's open transaction and never committed here,
        so the audit entry lands or disappears together with the mutation it describes.
        """
        def sanitize(obj: Any):
            if hasattr(obj, "model_dump"):
                return obj.model_dump(mode="json")
            if isinstance(obj, dict):
                return {k: sanitize(v) for k, v in obj.items()}
            if isinstance(obj, (list, tuple)):
                return [sanitize(i) for i in obj]
            if isinstance(obj, (int, float, str, bool)) or obj is None:
                return obj
            return str(obj)

        db_log = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            user_role=user_role,
            details=sanitize(details),
            before_state=sanitize(before_state),
            after_state=sanitize(after_state)
        )
        self.db.add(db_log)
        self.db.flush()
        return db_log

    # Static wrapper used by the workflow services
    @staticmethod
    def log(db, *args, **kwargs):
        service = AuditService(db)
        return service.log_action(*args, **kwargs)
