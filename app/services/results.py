# app/services/results.py
"""Outcome type returned by the device and transaction services instead of raising."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    INTERNAL_ERROR = "internal_error"


@dataclass
class ServiceResult:
    success: bool
    value: Any = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, value: Any = None) -> "ServiceResult":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: ErrorKind, message: str) -> "ServiceResult":
        return cls(success=False, error=error, message=message)
