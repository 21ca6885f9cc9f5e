# ========================
# src/employee_cleaning/ingestion.py
# ========================

"""
Data Ingestion Module

Reads raw employee exports in chunks and converts CSV text into typed records.
"""

import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

EMPLOYEE_FIELDS = [
    'employee_id', 'first_name', 'last_name', 'email', 'hire_date',
    'salary', 'department', 'phone_number'
]


def _to_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value.strip())
    except (AttributeError, ValueError):
        return None


def _to_decimal(value: Optional[str]) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(value.strip().replace(',', ''))
    except InvalidOperation:
        logger.warning(f"Unreadable salary value treated as missing: {value!r}")
        return None


def parse_raw_record(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert one CSV row into an employee record.

    Empty cells become None. Only the numeric columns are converted here;
    names, emails, phones and hire dates keep their raw text so the
    cleaning steps see them exactly as exported.

    Args:
        row (dict): A row as produced by csv.DictReader

    Returns:
        dict: The typed employee record
    """
    record = {key: (value if value != '' else None) for key, value in row.items()}

    if 'employee_id' in record:
        employee_id = _to_int(record['employee_id'])
        if employee_id is None and record['employee_id'] is not None:
            logger.warning(f"Non-numeric employee_id kept as text: {record['employee_id']!r}")
        else:
            record['employee_id'] = employee_id
    if 'salary' in record:
        record['salary'] = _to_decimal(record['salary'])
    if 'department_id' in record:
        record['department_id'] = _to_int(record['department_id'])

    return record


class EmployeeCSVReader:
    """
    A memory-efficient CSV reader that reads an employee export in chunks.
    """

    def __init__(self, file_path):
        """
        Initialize the CSV reader.

        Args:
            file_path (str): Path to the CSV file to read
        """
        self.file_path = file_path
        self.header = []
        logger.info(f"Initialized EmployeeCSVReader for file: {file_path}")

    def read_in_chunks(self, chunk_size, typed=True):
        """
        A generator that yields a list of records for each chunk of data.

        Args:
            chunk_size (int): The number of rows to yield per chunk.
            typed (bool): Convert rows with parse_raw_record.

        Yields:
            list[dict]: A list of dictionaries representing a chunk of rows.
        """
        try:
            with open(self.file_path, 'r', newline='', encoding='utf-8') as f:
                reader = csv.DictReader(f)
                self.header = reader.fieldnames
                logger.info(f"CSV header: {self.header}")

                chunk = []
                row_count = 0

                for row in reader:
                    chunk.append(parse_raw_record(row) if typed else row)
                    row_count += 1

                    if len(chunk) == chunk_size:
                        logger.debug(f"Yielding chunk with {len(chunk)} rows")
                        yield chunk
                        chunk = []

                if chunk:
                    logger.debug(f"Yielding final chunk with {len(chunk)} rows")
                    yield chunk

                logger.info(f"Total rows read: {row_count}")

        except FileNotFoundError:
            logger.error(f"File '{self.file_path}' was not found")
            raise
        except Exception as e:
            logger.error(f"Error reading CSV file: {e}")
            raise

    def read_all(self, chunk_size=1000):
        """Read every record of the file into a single list."""
        records = []
        for chunk in self.read_in_chunks(chunk_size):
            records.extend(chunk)
        return records
