# ========================
# src/employee_cleaning/storage.py
# ========================

"""
Data Storage Module

Writes the cleaned employee table, the departments table and the data
quality reports to disk.
"""

import csv
import json
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Any, Optional
from pathlib import Path

from .store import EmployeeTable

logger = logging.getLogger(__name__)

CLEAN_EMPLOYEE_FIELDS = [
    'employee_id', 'first_name', 'last_name', 'email', 'hire_date',
    'salary', 'phone_number', 'department_id'
]


def _format_value(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


class CleanedDataSaver:
    """
    Saves cleaned employee data and reports as CSV and JSON files.
    """

    def __init__(self, output_dir: str = "data/processed"):
        """
        Initialize the data saver.

        Args:
            output_dir (str): Directory to save output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"CleanedDataSaver initialized with output directory: {self.output_dir}")

    def save_all_data(self, table: EmployeeTable,
                      reports: Optional[Dict[str, List[Dict]]] = None,
                      parse_failures: Optional[List[Dict]] = None,
                      summary: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
        """
        Save the cleaned table and everything produced alongside it.

        Returns:
            dict: Mapping of data type to saved file path
        """
        saved_files = {
            'employees': self.save_employees(table),
            'departments': self.save_departments(table),
            'parse_failures': self.save_parse_failures(parse_failures or []),
        }
        for name, rows in (reports or {}).items():
            saved_files[name] = self.save_report(name, rows)
        if summary is not None:
            saved_files['summary'] = self._save_summary(summary)

        logger.info(f"All data saved successfully to {len(saved_files)} files")
        return saved_files

    def save_employees(self, table: EmployeeTable) -> str:
        file_path = self.output_dir / "employees_clean.csv"
        columns = table.columns()
        headers = [c for c in CLEAN_EMPLOYEE_FIELDS if c in columns]
        headers += [c for c in columns if c not in headers]
        self._write_csv(file_path, headers, table.read_all())
        return str(file_path)

    def save_departments(self, table: EmployeeTable) -> str:
        file_path = self.output_dir / "departments.csv"
        self._write_csv(file_path, ['department_id', 'department_name'], table.departments)
        return str(file_path)

    def save_parse_failures(self, failures: List[Dict]) -> str:
        file_path = self.output_dir / "parse_failures.csv"
        self._write_csv(file_path, ['employee_id', 'hire_date', 'error'], failures)
        return str(file_path)

    def save_report(self, name: str, rows: List[Dict]) -> str:
        """Save one report; headers are the union of the row keys."""
        file_path = self.output_dir / f"{name}.csv"
        headers: List[str] = []
        for row in rows:
            headers += [k for k in row if k not in headers]
        if not rows:
            logger.warning(f"Report '{name}' is empty")
        self._write_csv(file_path, headers or ['employee_id'], rows)
        return str(file_path)

    def _save_summary(self, summary_data: Dict) -> str:
        file_path = self.output_dir / "cleaning_summary.json"

        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(summary_data, f, indent=2, ensure_ascii=False, default=str)

        logger.info(f"Summary saved to {file_path}")
        return str(file_path)

    def _write_csv(self, file_path: Path, headers: List[str], data_items: List[Dict]) -> None:
        """Write data to CSV file."""
        try:
            with open(file_path, 'w', newline='', encoding='utf-8') as f:
                writer = csv.DictWriter(f, fieldnames=headers, extrasaction='ignore')
                writer.writeheader()
                for item in data_items:
                    writer.writerow({k: _format_value(v) for k, v in item.items()})

            logger.info(f"Saved {len(data_items)} records to {file_path}")

        except OSError as e:
            logger.error(f"Error writing CSV file {file_path}: {e}")
            raise

    def create_data_dictionary(self) -> str:
        """Create a data dictionary explaining all output files."""
        file_path = self.output_dir / "DATA_DICTIONARY.md"

        content = """# Data Dictionary

## employees_clean.csv
One row per employee after cleaning.

| Column | Type | Description |
|--------|------|-------------|
| employee_id | integer | Unique employee identifier |
| first_name | string | Trimmed, first letter capitalized |
| last_name | string | Trimmed, first letter capitalized |
| email | string | Lowercased; noemail@company.com when missing |
| hire_date | date | YYYY-MM-DD; unparseable values kept as exported |
| salary | decimal | Between 0 and 1,000,000 |
| phone_number | string | Digits only |
| department_id | integer | References departments.csv, empty if unknown |

## departments.csv

| Column | Type | Description |
|--------|------|-------------|
| department_id | integer | Generated identifier |
| department_name | string | Canonical department name |

## Reports
Computed on the raw data before cleaning.

- duplicate_employees.csv: employee_id and number of occurrences
- missing_values.csv: rows with no email or no salary
- salary_outliers.csv: rows with salary above 1,000,000
- invalid_emails.csv: rows whose email is not a valid address
- avg_salary_by_department.csv: mean salary and head count per department

## parse_failures.csv
Hire dates that could not be cast, with the employee they belong to.

## cleaning_summary.json
Step-by-step row counts and record totals for the run.
"""

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(content)

        logger.info(f"Data dictionary created at {file_path}")
        return str(file_path)
