from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self, 
        message: str, 
        status_code: int = 400, 
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationError(AppException):
    """Missing or malformed input. Named after the HTTP contract, not pydantic's class."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )

class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )

class ForbiddenTransitionError(AppException):
    """A workflow guard failed: wrong goal state or the actor does not own the record."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=403,
            error_code="FORBIDDEN_TRANSITION",
            details=details
        )

class NoActiveCycleError(AppException):
    def __init__(self, message: str = "No active appraisal cycle found."):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NO_ACTIVE_CYCLE"
        )

class WeightageExceededError(AppException):
    def __init__(self, remaining: float, limit: float = 100.0):
        super().__init__(
            message=(
                f"Goal submission failed: Total weightage exceeds {limit:.0f}%. "
                f"Remaining available weight is {remaining:.2f}%."
            ),
            status_code=400,
            error_code="WEIGHTAGE_EXCEEDED",
            details={"remaining": remaining}
        )
        self.remaining = remaining

class SelfReviewError(AppException):
    def __init__(self, message: str = "Cannot submit 360 feedback on yourself."):
        super().__init__(
            message=message,
            status_code=403,
            error_code="SELF_REVIEW"
        )

class DuplicateFeedbackError(AppException):
    def __init__(self, message: str = "You have already submitted feedback for this employee in the current cycle."):
        super().__init__(
            message=message,
            status_code=409,
            error_code="DUPLICATE_FEEDBACK"
        )

class StorageError(AppException):
    def __init__(self, message: str = "Database error. The operation was rolled back."):
        super().__init__(
            message=message,
            status_code=500,
            error_code="STORAGE_ERROR"
        )

class AuthenticationError(AppException):
    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )
