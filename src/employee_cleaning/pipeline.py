# ========================
# src/employee_cleaning/pipeline.py
# ========================

"""
Cleaning Pipeline Module

Runs the fixed sequence of employee cleaning steps as one all-or-nothing unit,
and provides the lighter clean_employee_data procedure.
"""

import time
import logging
from decimal import Decimal
from typing import Dict, Any, Optional

from .cleaning import EmployeeCleaner
from .errors import ConstraintViolation
from .store import EmployeeTable
from ..utils.config import Config
from ..utils.performance_monitor import monitor_performance

logger = logging.getLogger(__name__)


class CleaningPipeline:
    """
    Applies the full cleaning sequence to an employee table.

    Department synonyms are canonicalized before the departments table is
    built, so "HR" and "Human Resources" end up as one department. Names are
    trimmed before they are capitalized, so "  jOHN  " becomes "John".
    """

    # (step number, description, EmployeeCleaner method)
    STEP_ORDER = [
        (1, "Remove duplicate employees", 'remove_duplicates'),
        (2, "Fill missing emails", 'fill_missing_email'),
        (3, "Drop records with missing salary", 'drop_missing_salary'),
        (4, "Lowercase emails", 'lowercase_email'),
        (8, "Canonicalize department synonyms", 'canonicalize_departments'),
        (5, "Normalize departments", 'normalize_departments'),
        (6, "Cap salary outliers", 'cap_salary_outliers'),
        (9, "Trim names", 'trim_names'),
        (7, "Standardize name casing", 'standardize_names'),
        (10, "Strip non-digits from phone numbers", 'strip_phone_numbers'),
        (11, "Cast hire dates", 'cast_hire_dates'),
    ]

    def __init__(self, config: Optional[Config] = None,
                 cleaner: Optional[EmployeeCleaner] = None):
        """
        Initialize the cleaning pipeline.

        Args:
            config (Config): Configuration object
            cleaner (EmployeeCleaner): Cleaner to use, built from config if omitted
        """
        self.config = config or Config()
        self.cleaner = cleaner or EmployeeCleaner(
            default_email=self.config.DEFAULT_EMAIL,
            salary_cap=self.config.SALARY_CAP,
            salary_floor=self.config.SALARY_FLOOR
        )
        self.step_results: Dict[str, Dict[str, Any]] = {}
        self.performance: Dict[str, Any] = {}
        logger.info(f"CleaningPipeline initialized with {len(self.STEP_ORDER)} steps")

    def run(self, table: EmployeeTable) -> EmployeeTable:
        """
        Clean the table in place and return it.

        If any step or the final validation fails, the table is rolled back to
        the state it had before the run and the error propagates.
        """
        logger.info(f"Starting cleaning pipeline on {len(table)} records...")
        self.cleaner.reset_statistics()
        self.step_results = {}

        with table.transaction(), self.cleaner.statistics_checkpoint():
            with monitor_performance("CleaningPipeline") as monitor:
                for number, description, method_name in self.STEP_ORDER:
                    started = time.time()
                    affected = getattr(self.cleaner, method_name)(table)
                    elapsed = time.time() - started

                    self.step_results[method_name] = {
                        'step': number,
                        'description': description,
                        'rows_affected': affected,
                        'seconds': elapsed,
                    }
                    monitor.add_checkpoint(method_name, {'rows_affected': affected})
                    logger.info(f"Step {number} - {description}: {affected} rows affected")

                monitor.update_progress(len(table))
                self.validate(table)

                if self.config.ENFORCE_SALARY_CONSTRAINT and not table.has_salary_constraint:
                    table.add_salary_constraint(self.config.SALARY_FLOOR, self.config.SALARY_CAP)

            self.performance = monitor.get_current_stats()

        logger.info(f"Cleaning pipeline finished: {len(table)} records, "
                    f"{len(table.departments)} departments")
        return table

    def validate(self, table: EmployeeTable) -> None:
        """
        Check the post-conditions of a full run.

        Raises:
            ConstraintViolation: On the first broken invariant.
        """
        records = table.read_all()

        seen, duplicates = set(), []
        for record in records:
            employee_id = record.get('employee_id')
            if employee_id is None:
                continue
            if employee_id in seen:
                duplicates.append(employee_id)
            seen.add(employee_id)
        if duplicates:
            raise ConstraintViolation('unique_employee_id', duplicates)

        for field in ('email', 'salary'):
            missing = [r.get('employee_id') for r in records if r.get(field) is None]
            if missing:
                raise ConstraintViolation(f'not_null_{field}', missing)

        floor, cap = Decimal(self.config.SALARY_FLOOR), Decimal(self.config.SALARY_CAP)
        out_of_bounds = [r.get('employee_id') for r in records if not floor <= r['salary'] <= cap]
        if out_of_bounds:
            raise ConstraintViolation('chk_salary', out_of_bounds)

        department_ids = table.department_ids()
        dangling = [
            r.get('employee_id') for r in records
            if r.get('department_id') is not None and r['department_id'] not in department_ids
        ]
        if dangling:
            raise ConstraintViolation('fk_department', dangling)

        leftover = [r.get('employee_id') for r in records if 'department' in r]
        if leftover:
            raise ConstraintViolation('department_column_dropped', leftover)

        logger.debug("Post-run invariants hold")

    def get_statistics(self) -> Dict[str, Any]:
        return {
            **self.cleaner.get_statistics(),
            'steps': self.step_results,
            'performance': self.performance,
        }


def clean_employee_data(table: EmployeeTable,
                        cleaner: Optional[EmployeeCleaner] = None) -> EmployeeTable:
    """
    The lighter cleaning procedure: remove duplicates, lowercase emails and
    fill missing salaries with 0.

    Unlike CleaningPipeline this never deletes a record for a missing salary.
    """
    cleaner = cleaner or EmployeeCleaner()
    with table.transaction(), cleaner.statistics_checkpoint():
        removed = cleaner.remove_duplicates(table)
        lowered = cleaner.lowercase_email(table)
        filled = cleaner.fill_missing_salary(table)

    logger.info(f"clean_employee_data: {removed} duplicates removed, "
                f"{lowered} emails lowercased, {filled} salaries filled")
    return table
