class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler encounters a logical error or invalid state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class InsufficientDataError(SchedulerError):
    """Raised before generation when there is nothing to schedule or nowhere to put it."""

class GenerationFailedError(SchedulerError):
    """Raised at the API boundary when every generation attempt came back empty."""
    def __init__(self, violations: list[dict]):
        super().__init__(
            "Unable to generate timetables: constraints could not be satisfied",
            details={"violations": violations},
        )

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class InvalidStateError(AppError):
    """Raised when a timetable lifecycle transition is not allowed."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)
