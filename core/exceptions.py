"""
Custom exception classes for the catalog services
"""
from typing import Any, Dict, Iterable, Optional
from fastapi import status


class BaseCustomException(Exception):
    """Base custom exception class"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(BaseCustomException):
    """Raised when a requested resource is not found"""

    def __init__(self, resource: str, identifier: Any, details: Optional[Dict[str, Any]] = None):
        message = f"{resource} with identifier '{identifier}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details
        )


class ValidationError(BaseCustomException):
    """Raised when a required field is missing or malformed"""

    def __init__(self, message: str, field: str = None, details: Optional[Dict[str, Any]] = None):
        if field:
            details = details or {}
            details["field"] = field

        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details
        )


class ReferentialIntegrityError(BaseCustomException):
    """Raised when a delete is blocked because the row is still referenced"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details=details
        )


class VariationInUseError(ReferentialIntegrityError):
    """Raised when reconciliation would delete a variation that has been ordered"""

    def __init__(self, variation_ids: Iterable[int]):
        self.variation_ids = sorted(variation_ids)
        super().__init__(
            message="Cannot delete variation as it has been ordered",
            details={"variation_ids": self.variation_ids}
        )
