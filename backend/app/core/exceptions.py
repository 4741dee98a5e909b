class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ValidationError(AppError):
    """Raised when input is missing or malformed."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class StateGuardViolation(AppError):
    """Raised when a status transition is not allowed from the current state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class PermissionDeniedError(AppError):
    """Raised when the acting user lacks authority over the target entity."""
    def __init__(self, message: str):
        super().__init__(message, status_code=403)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
        self.resource_type = resource_type
        self.resource_id = resource_id

class ConflictError(AppError):
    """Raised when a reservation overlaps an existing one."""
    def __init__(self, message: str, conflicts: list | None = None, details: dict = None):
        payload = dict(details or {})
        if conflicts is not None:
            payload.setdefault("conflicts", conflicts)
        super().__init__(message, status_code=409, details=payload)
