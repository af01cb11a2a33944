class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler encounters a logical error or invalid state."""
    def __init__(self, message: str, details: dict = None, status_code: int = 400):
        super().__init__(message, status_code=status_code, details=details)

class InvalidInputError(SchedulerError):
    """Raised before any search starts when the scheduling input is rejected."""
    def __init__(self, message: str, problems: list[str] = None):
        problems = list(problems or [])
        super().__init__(message, details={"problems": problems}, status_code=422)
        self.problems = problems

class SchedulerInvariantError(SchedulerError):
    """Raised when a generated timetable breaks a hard constraint. Always an engine defect."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, details=details, status_code=500)
