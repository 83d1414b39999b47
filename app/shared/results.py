"""Operation results returned by the service layer"""

import enum
from dataclasses import dataclass
from typing import Any, Optional


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    UNAVAILABLE = "unavailable"
    INFRASTRUCTURE = "infrastructure"


HTTP_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.BUSINESS_RULE: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.UNAVAILABLE: 503,
    ErrorKind.INFRASTRUCTURE: 500,
}


@dataclass(frozen=True)
class OperationResult:
    """
    Success or failure of a business operation.

    A success never carries an error; a failure always does.
    """

    is_success: bool
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    data: Any = None

    def __post_init__(self):
        if self.is_success and self.error:
            raise ValueError("A successful result cannot carry an error")
        if not self.is_success and not self.error:
            raise ValueError("A failed result must carry an error")

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    @property
    def http_status(self) -> int:
        if self.is_success:
            return 200
        return HTTP_STATUS_BY_KIND[self.kind or ErrorKind.BUSINESS_RULE]

    @classmethod
    def success(cls, data: Any = None) -> "OperationResult":
        return cls(is_success=True, data=data)

    @classmethod
    def failure(cls, error: str, kind: ErrorKind = ErrorKind.BUSINESS_RULE) -> "OperationResult":
        return cls(is_success=False, error=error, kind=kind)
