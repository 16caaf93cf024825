"""CIBorium exception hierarchy."""

from typing import Any


class CiboriumError(Exception):
    """Base exception for all CIBorium errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(CiboriumError):
    """Error in CIBorium configuration."""

    pass


class ValidationError(CiboriumError):
    """Error in data validation."""

    def __init__(
        self, message: str, field: str | None = None, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details)
        self.field = field


class PipelineError(CiboriumError):
    """Error while driving a pipeline."""

    def __init__(
        self, message: str, step: int | None = None, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, details)
        self.step = step
