# ========================
# src/employee_cleaning/reports.py
# ========================

"""
Data Quality Reports Module

Read-only queries over an employee table used to profile data before and
after cleaning.
"""

import re
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Any, Optional

from .cleaning import EmployeeCleaner
from .errors import ParseFailure
from .store import EmployeeTable

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$')


class EmployeeReports:
    """
    Reporting queries over an EmployeeTable. None of them mutate the table.
    """

    def __init__(self, table: EmployeeTable, salary_threshold=1000000):
        """
        Initialize the reports.

        Args:
            table (EmployeeTable): Table to query
            salary_threshold: Salaries above this are reported as outliers
        """
        self.table = table
        self.salary_threshold = Decimal(salary_threshold)

    def find_duplicates(self) -> List[Dict[str, Any]]:
        """employee_ids that occur more than once, with their counts."""
        counts: Dict[Any, int] = defaultdict(int)
        for record in self.table.read_all():
            counts[record.get('employee_id')] += 1
        return [
            {'employee_id': employee_id, 'count': count}
            for employee_id, count in counts.items() if count > 1
        ]

    def find_missing_values(self) -> List[Dict[str, Any]]:
        return [
            dict(r) for r in self.table.read_all()
            if r.get('email') is None or r.get('salary') is None
        ]

    def find_salary_outliers(self, threshold=None) -> List[Dict[str, Any]]:
        limit = self.salary_threshold if threshold is None else Decimal(threshold)
        return [
            dict(r) for r in self.table.read_all()
            if r.get('salary') is not None and r['salary'] > limit
        ]

    def find_invalid_emails(self) -> List[Dict[str, Any]]:
        """
        Records whose email is present but not a plausible address.
        Missing emails are covered by find_missing_values instead.
        """
        return [
            dict(r) for r in self.table.read_all()
            if r.get('email') is not None and not EMAIL_PATTERN.match(str(r['email']))
        ]

    def average_salary_by_department(self) -> List[Dict[str, Any]]:
        """
        Mean salary per department.

        Uses the department text while it still exists, otherwise the name of
        the linked department. Missing salaries are ignored; employees with no
        department form their own group under None.
        """
        groups: Dict[Optional[str], Dict[str, Any]] = defaultdict(
            lambda: {'total': Decimal(0), 'salaried': 0, 'employees': 0}
        )
        for record in self.table.read_all():
            if 'department' in record:
                department = record['department']
            else:
                department = self.table.department_name_for(record.get('department_id'))

            group = groups[department]
            group['employees'] += 1
            if record.get('salary') is not None:
                group['total'] += Decimal(record['salary'])
                group['salaried'] += 1

        rows = []
        for department, group in groups.items():
            average = group['total'] / group['salaried'] if group['salaried'] else None
            rows.append({
                'department': department,
                'avg_salary': average,
                'employee_count': group['employees'],
            })
        return rows

    def salary_with_default(self, default=0) -> List[Dict[str, Any]]:
        """employee_id and salary, with missing salaries shown as the default."""
        return [
            {'employee_id': r.get('employee_id'),
             'salary': r['salary'] if r.get('salary') is not None else Decimal(default)}
            for r in self.table.read_all()
        ]

    def hire_dates_as_dates(self, cleaner: Optional[EmployeeCleaner] = None) -> List[Dict[str, Any]]:
        """Preview of the hire date cast; values that cannot be parsed show as None."""
        cleaner = cleaner or EmployeeCleaner()
        rows = []
        for record in self.table.read_all():
            try:
                hire_date = cleaner.parse_hire_date(record.get('hire_date'))
            except ParseFailure:
                hire_date = None
            rows.append({'employee_id': record.get('employee_id'), 'hire_date': hire_date})
        return rows

    def run_all(self) -> Dict[str, List[Dict[str, Any]]]:
        """Run every report, keyed by report name."""
        results = {
            'duplicate_employees': self.find_duplicates(),
            'missing_values': self.find_missing_values(),
            'salary_outliers': self.find_salary_outliers(),
            'invalid_emails': self.find_invalid_emails(),
            'avg_salary_by_department': self.average_salary_by_department(),
        }
        logger.info("Report summary: " + ", ".join(
            f"{name}={len(rows)}" for name, rows in results.items()
        ))
        return results
