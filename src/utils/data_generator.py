# ========================
# src/utils/data_generator.py
# ========================

"""
Data Generation Utilities

Generates messy employee exports with the kinds of problems the cleaning
pipeline is meant to fix.
"""

import csv
import random
import logging
from datetime import date, timedelta
from typing import List, Dict, Any, Optional
from pathlib import Path

logger = logging.getLogger(__name__)

EXPORT_HEADER = [
    'employee_id', 'first_name', 'last_name', 'email', 'hire_date',
    'salary', 'department', 'phone_number'
]


class EmployeeDataGenerator:
    """
    Data generator for creating realistic, dirty employee datasets.
    """

    FIRST_NAMES = ["john", "mary", "alice", "robert", "priya", "wei", "carlos",
                   "fatima", "olga", "kwame", "emma", "liam"]
    LAST_NAMES = ["smith", "johnson", "garcia", "chen", "patel", "okafor",
                  "novak", "kim", "silva", "brown", "müller", "o'neil"]
    DEPARTMENTS = {
        "Human Resources": ["HR", "hr", "Human Resources"],
        "Information Technology": ["IT", "Information Technology"],
        "Finance": ["Finance"],
        "Sales": ["Sales"],
        "Marketing": ["Marketing"],
    }
    DATE_FORMATS = ["%Y-%m-%d", "%Y/%m/%d", "%d-%b-%Y", "%m/%d/%Y"]

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize data generator.

        Args:
            seed (int): Random seed for reproducible data generation
        """
        self.rng = random.Random(seed)
        logger.info(f"EmployeeDataGenerator initialized with seed: {seed}")

    def generate_dataset(self,
                         file_path: str,
                         num_rows: int,
                         error_rate: float = 0.15,
                         start_date: Optional[date] = None) -> Dict[str, Any]:
        """
        Generate an employee export with controlled error injection.

        Args:
            file_path (str): Output CSV file path
            num_rows (int): Number of rows to generate
            error_rate (float): Fraction of records with intentional errors
            start_date (date): Earliest hire date

        Returns:
            dict: Generation statistics
        """
        logger.info(f"Generating {num_rows:,} employee rows with {error_rate:.1%} error rate...")

        if start_date is None:
            start_date = date(2010, 1, 1)

        stats = {
            'total_rows': num_rows,
            'error_rate': error_rate,
            'records_with_errors': 0,
            'error_types': {}
        }

        Path(file_path).parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(EXPORT_HEADER)

            rows = [self._generate_single_record(i, start_date) for i in range(num_rows)]
            for row in rows:
                if self.rng.random() < error_rate:
                    stats['records_with_errors'] += 1
                    extra = self._inject_errors(row, rows, stats)
                    if extra is not None:
                        writer.writerow([extra[k] for k in EXPORT_HEADER])
                writer.writerow([row[k] for k in EXPORT_HEADER])

        stats['error_rate_actual'] = stats['records_with_errors'] / num_rows if num_rows else 0.0

        logger.info(f"Dataset generated: {file_path}")
        logger.info(f"Error breakdown: {stats['error_types']}")
        return stats

    def _generate_single_record(self, index: int, start_date: date) -> Dict[str, Any]:
        """Generate a single record with the everyday inconsistencies of a raw export."""
        first_name = self.rng.choice(self.FIRST_NAMES)
        last_name = self.rng.choice(self.LAST_NAMES)
        department = self.rng.choice(self.rng.choice(list(self.DEPARTMENTS.values())))
        hire_date = start_date + timedelta(days=self.rng.randint(0, 5000))

        email = f"{first_name}.{last_name}@company.com".replace("'", "")
        if self.rng.random() < 0.3:
            email = email.title()

        if self.rng.random() < 0.3:
            first_name = f"  {first_name.upper()} "
        if self.rng.random() < 0.2:
            last_name = last_name.swapcase()

        area, prefix, line = (self.rng.randint(200, 999), self.rng.randint(200, 999),
                              self.rng.randint(0, 9999))
        phone_number = self.rng.choice([
            f"({area}) {prefix}-{line:04d}",
            f"{area}-{prefix}-{line:04d}",
            f"+1 {area}.{prefix}.{line:04d}",
            f"{area}{prefix}{line:04d}",
        ])

        return {
            'employee_id': 1000 + index,
            'first_name': first_name,
            'last_name': last_name,
            'email': email,
            'hire_date': hire_date.strftime(self.rng.choice(self.DATE_FORMATS)),
            'salary': f"{self.rng.randint(30000, 250000)}.00",
            'department': department,
            'phone_number': phone_number,
        }

    def _inject_errors(self, row: Dict[str, Any], rows: List[Dict[str, Any]],
                       stats: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Damage the row in place. Returns an extra duplicate row to write
        before it when the injected error is a duplicate.
        """
        error_type = self.rng.choice([
            'duplicate', 'null_email', 'null_salary', 'outlier_salary',
            'invalid_email', 'bad_hire_date', 'null_department'
        ])
        self._track_error_type(stats, error_type)

        if error_type == 'duplicate':
            duplicate = dict(self.rng.choice(rows))
            duplicate['employee_id'] = row['employee_id']
            return duplicate
        if error_type == 'null_email':
            row['email'] = ''
        elif error_type == 'null_salary':
            row['salary'] = ''
        elif error_type == 'outlier_salary':
            row['salary'] = f"{self.rng.randint(1000001, 9000000)}.00"
        elif error_type == 'invalid_email':
            row['email'] = row['email'].replace('@', ' at ')
        elif error_type == 'bad_hire_date':
            row['hire_date'] = self.rng.choice(['unknown', '31/31/2020', 'N/A'])
        elif error_type == 'null_department':
            row['department'] = ''
        return None

    def _track_error_type(self, stats: Dict[str, Any], error_type: str) -> None:
        stats['error_types'][error_type] = stats['error_types'].get(error_type, 0) + 1
