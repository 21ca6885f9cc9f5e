# ========================
# src/employee_cleaning/errors.py
# ========================

"""
Cleaning Errors

Infrastructure-level failures raised by the employee store and pipeline.
"""

from typing import Iterable, Optional, List


class CleaningError(Exception):
    """Base class for all employee cleaning errors."""


class StoreUnavailable(CleaningError):
    """The backing record collection cannot be read, written or deleted from."""


class ConstraintViolation(CleaningError):
    """A write or a finished run breaks a standing constraint on the collection."""

    def __init__(self, constraint: str, employee_ids: Optional[Iterable[int]] = None,
                 message: Optional[str] = None):
        self.constraint = constraint
        self.employee_ids: List[int] = list(employee_ids or [])
        if message is None:
            message = f"Constraint '{constraint}' violated"
            if self.employee_ids:
                message += f" by employee_id(s) {self.employee_ids[:10]}"
        super().__init__(message)


class ParseFailure(CleaningError):
    """A hire date could not be cast to a date. Recorded, never fatal."""

    def __init__(self, value, message: Optional[str] = None):
        self.value = value
        super().__init__(message or f"Could not parse hire_date {value!r}")
