# ========================
# src/employee_cleaning/cleaning.py
# ========================

"""
Data Cleaning Module

Value-level cleaning rules for employee fields and the table-level steps that
apply them to an EmployeeTable.
"""

import re
import logging
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .errors import ParseFailure
from .store import EmployeeTable

logger = logging.getLogger(__name__)

DEFAULT_EMAIL = "noemail@company.com"
SALARY_CAP = 1000000
SALARY_FLOOR = 0

_NON_DIGITS = re.compile(r'[^0-9]')


class EmployeeCleaner:
    """
    Applies cleaning and standardization rules to employee records.

    The public step methods each take an EmployeeTable, mutate it through the
    table's update/delete operations and return the number of rows affected.
    The value helpers are pure and pass None through; only parse_hire_date raises.
    """

    # Lookup is case-insensitive on the stripped value; anything else passes through.
    DEPARTMENT_SYNONYMS = {
        "hr": "Human Resources",
        "human resources": "Human Resources",
        "it": "Information Technology",
        "information technology": "Information Technology",
    }

    DATE_FORMATS = [
        "%Y-%m-%d",
        "%Y-%m-%d %H:%M:%S",
        "%Y/%m/%d",
        "%d-%b-%Y",
        "%m/%d/%Y",
        "%d/%m/%Y",
    ]

    def __init__(self,
                 default_email: str = DEFAULT_EMAIL,
                 salary_cap=SALARY_CAP,
                 salary_floor=SALARY_FLOOR):
        """
        Initialize the employee cleaner.

        Args:
            default_email (str): Placeholder written into missing emails
            salary_cap: Upper salary bound used by outlier capping
            salary_floor: Lower salary bound used by outlier capping
        """
        self.default_email = default_email
        self.salary_cap = Decimal(salary_cap)
        self.salary_floor = Decimal(salary_floor)
        self.reset_statistics()
        logger.info("EmployeeCleaner initialized")

    def reset_statistics(self) -> None:
        self.stats: Dict[str, int] = {
            'duplicates_removed': 0,
            'emails_filled': 0,
            'salaries_dropped': 0,
            'salaries_filled': 0,
            'emails_lowercased': 0,
            'departments_canonicalized': 0,
            'departments_created': 0,
            'employees_linked': 0,
            'salaries_capped': 0,
            'names_trimmed': 0,
            'names_standardized': 0,
            'phones_stripped': 0,
            'hire_dates_cast': 0,
        }
        self.parse_failures: List[Dict[str, Any]] = []

    @contextmanager
    def statistics_checkpoint(self):
        """Restore stats and parse_failures if the block raises."""
        saved = (dict(self.stats), list(self.parse_failures))
        try:
            yield
        except Exception:
            self.stats, self.parse_failures = saved
            raise

    # Value helpers

    def canonical_department(self, value: Optional[str]) -> Optional[str]:
        """Map a known department synonym to its canonical label."""
        if not isinstance(value, str):
            return value
        return self.DEPARTMENT_SYNONYMS.get(value.strip().lower(), value)

    @staticmethod
    def standardize_name(value: Optional[str]) -> Optional[str]:
        """First character upper case, the rest lower case. Empty stays empty."""
        if not isinstance(value, str):
            return value
        return value[:1].upper() + value[1:].lower()

    @staticmethod
    def trim(value: Optional[str]) -> Optional[str]:
        return value.strip() if isinstance(value, str) else value

    @staticmethod
    def digits_only(value: Any) -> Optional[str]:
        """Keep only the decimal digits of a phone number, in order."""
        if value is None:
            return None
        return _NON_DIGITS.sub('', str(value))

    def parse_hire_date(self, value: Any) -> date:
        """
        Cast a hire date to a date.

        Raises:
            ParseFailure: If the value is not a date and matches no known format.
        """
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if not isinstance(value, str) or not value.strip():
            raise ParseFailure(value)

        for fmt in self.DATE_FORMATS:
            try:
                return datetime.strptime(value.strip(), fmt).date()
            except ValueError:
                continue
        raise ParseFailure(value)

    def _hire_date_sort_key(self, value: Any):
        try:
            return (0, self.parse_hire_date(value))
        except ParseFailure:
            return (1, date.min)

    # Table steps

    def remove_duplicates(self, table: EmployeeTable) -> int:
        """
        Keep one record per employee_id: the earliest hire date wins. Ties go to
        the record with fewer empty fields, then to the one that appears first.
        Missing or unreadable hire dates rank last.
        Records without an employee_id are never treated as duplicates.
        """
        groups: Dict[Any, List[int]] = {}
        for index, record in enumerate(table.read_all()):
            if record.get('employee_id') is None:
                continue
            groups.setdefault(record['employee_id'], []).append(index)

        records = table.read_all()
        doomed = []
        for employee_id, indices in groups.items():
            if len(indices) < 2:
                continue
            ranked = sorted(
                indices,
                key=lambda i: (self._hire_date_sort_key(records[i].get('hire_date')),
                               sum(v is None for v in records[i].values()), i)
            )
            doomed.extend(ranked[1:])
            logger.debug(f"employee_id {employee_id}: keeping row {ranked[0]}, dropping {ranked[1:]}")

        removed = table.delete_indices(doomed)
        self.stats['duplicates_removed'] += removed
        return removed

    def fill_missing_email(self, table: EmployeeTable) -> int:
        """
        Write the default email into records that have none.

        Args:
            table (EmployeeTable): Table to clean

        Returns:
            int: Number of records filled
        """
        filled = table.update_where(
            lambda r: r.get('email') is None,
            lambda r: {'email': self.default_email}
        )
        self.stats['emails_filled'] += filled
        return filled

    def drop_missing_salary(self, table: EmployeeTable) -> int:
        """Destructive policy: records without a salary are deleted."""
        dropped = table.delete_where(lambda r: r.get('salary') is None)
        self.stats['salaries_dropped'] += dropped
        return dropped

    def fill_missing_salary(self, table: EmployeeTable) -> int:
        """Corrective policy: records without a salary get a salary of 0."""
        filled = table.update_where(
            lambda r: r.get('salary') is None,
            lambda r: {'salary': Decimal(0)}
        )
        self.stats['salaries_filled'] += filled
        return filled

    def lowercase_email(self, table: EmployeeTable) -> int:
        """Lowercase every email; returns the number of records changed."""
        changed = table.update_where(
            lambda r: isinstance(r.get('email'), str),
            lambda r: {'email': r['email'].lower()}
        )
        self.stats['emails_lowercased'] += changed
        return changed

    def canonicalize_departments(self, table: EmployeeTable) -> int:
        """
        Replace department synonyms with their canonical label.

        Args:
            table (EmployeeTable): Table to clean

        Returns:
            int: Number of records relabelled
        """
        changed = table.update_where(
            lambda r: isinstance(r.get('department'), str),
            lambda r: {'department': self.canonical_department(r['department'])}
        )
        self.stats['departments_canonicalized'] += changed
        return changed

    def normalize_departments(self, table: EmployeeTable) -> int:
        """
        Move department names into the departments table.

        Distinct names are inserted in first-seen order, each employee gets the
        matching department_id and the department text column is dropped.
        Records that no longer carry a department field are left alone.
        """
        before = len(table.departments)
        ids: Dict[str, int] = {}
        for record in table.read_all():
            name = record.get('department')
            if name is not None and name not in ids:
                ids[name] = table.insert_department(name)
        self.stats['departments_created'] += len(table.departments) - before

        linked = table.update_where(
            lambda r: 'department' in r,
            lambda r: {'department_id': ids.get(r['department'], r.get('department_id'))}
        )
        table.drop_column('department')

        self.stats['employees_linked'] += linked
        return linked

    def cap_salary_outliers(self, table: EmployeeTable) -> int:
        """
        Clamp salaries into [salary_floor, salary_cap]. Missing salaries are skipped.

        Returns:
            int: Number of salaries changed
        """
        capped = table.update_where(
            lambda r: r.get('salary') is not None
            and not self.salary_floor <= r['salary'] <= self.salary_cap,
            lambda r: {'salary': min(max(Decimal(r['salary']), self.salary_floor), self.salary_cap)}
        )
        self.stats['salaries_capped'] += capped
        return capped

    def trim_names(self, table: EmployeeTable) -> int:
        """Strip surrounding whitespace from first and last names."""
        trimmed = table.update_where(
            lambda r: True,
            lambda r: {'first_name': self.trim(r.get('first_name')),
                       'last_name': self.trim(r.get('last_name'))}
        )
        self.stats['names_trimmed'] += trimmed
        return trimmed

    def standardize_names(self, table: EmployeeTable) -> int:
        """
        Capitalize first and last names.

        Returns:
            int: Number of records changed
        """
        changed = table.update_where(
            lambda r: True,
            lambda r: {'first_name': self.standardize_name(r.get('first_name')),
                       'last_name': self.standardize_name(r.get('last_name'))}
        )
        self.stats['names_standardized'] += changed
        return changed

    def strip_phone_numbers(self, table: EmployeeTable) -> int:
        """Reduce phone numbers to their digits; returns the number changed."""
        changed = table.update_where(
            lambda r: r.get('phone_number') is not None,
            lambda r: {'phone_number': self.digits_only(r['phone_number'])}
        )
        self.stats['phones_stripped'] += changed
        return changed

    def cast_hire_dates(self, table: EmployeeTable) -> int:
        """
        Cast every hire date to a date. Values that cannot be parsed are left
        untouched and listed in parse_failures.
        """
        def _cast(record):
            try:
                return {'hire_date': self.parse_hire_date(record['hire_date'])}
            except ParseFailure as e:
                self.parse_failures.append({
                    'employee_id': record.get('employee_id'),
                    'hire_date': record['hire_date'],
                    'error': str(e),
                })
                logger.warning(f"employee_id {record.get('employee_id')}: {e}")
                return {}

        cast = table.update_where(lambda r: r.get('hire_date') is not None, _cast)
        self.stats['hire_dates_cast'] += cast
        return cast

    def get_statistics(self) -> Dict[str, int]:
        """Get cleaning statistics."""
        return {**self.stats, 'parse_failures': len(self.parse_failures)}
