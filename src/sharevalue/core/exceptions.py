"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class ScenarioOrderError(AppError):
    """Raised when a reorder request does not match the stored scenarios exactly."""

    def __init__(self, message: str):
        super().__init__(message, code="SCENARIO_ORDER_ERROR")


class SourceError(AppError):
    """Raised by a quote or rate source when upstream data is missing or unusable."""

    def __init__(self, source: str, detail: str):
        super().__init__(f"{source}: {detail}", code="SOURCE_ERROR")
