# ========================
# src/employee_cleaning/__init__.py
# ========================

"""
Employee Cleaning Package

Core components of the employee data cleaning pipeline:
- ingestion: Chunked CSV reading and type conversion
- store: The explicit employee table the steps operate on
- cleaning: Field rules and cleaning steps
- pipeline: Ordered, all-or-nothing execution of the steps
- reports: Read-only data quality queries
- storage: Output management
- orchestrator: File-to-file job coordination
"""

from .errors import CleaningError, StoreUnavailable, ConstraintViolation, ParseFailure
from .ingestion import EmployeeCSVReader, parse_raw_record
from .store import EmployeeTable
from .cleaning import EmployeeCleaner
from .pipeline import CleaningPipeline, clean_employee_data
from .reports import EmployeeReports
from .storage import CleanedDataSaver
from .orchestrator import EmployeeDataJob

__all__ = [
    'CleaningError',
    'StoreUnavailable',
    'ConstraintViolation',
    'ParseFailure',
    'EmployeeCSVReader',
    'parse_raw_record',
    'EmployeeTable',
    'EmployeeCleaner',
    'CleaningPipeline',
    'clean_employee_data',
    'EmployeeReports',
    'CleanedDataSaver',
    'EmployeeDataJob'
]

__version__ = "1.0.0"
