# ========================
# tests/test_ingestion.py
# ========================

import unittest
import tempfile
import os
import sys
import csv
from decimal import Decimal

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.employee_cleaning.ingestion import EmployeeCSVReader, parse_raw_record

HEADER = ['employee_id', 'first_name', 'last_name', 'email', 'hire_date',
          'salary', 'department', 'phone_number']


def write_csv(rows):
    with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False, newline='') as f:
        writer = csv.writer(f)
        writer.writerows(rows)
        return f.name


class TestDataIngestion(unittest.TestCase):
    """Test the CSV ingestion module."""

    def test_csv_reader_chunked_processing(self):
        """Test that EmployeeCSVReader properly chunks data."""
        temp_file_path = write_csv([
            HEADER,
            ['1', 'ann', 'lee', 'Ann@X.com', '2020-01-01', '50000', 'HR', '(555) 000-1111'],
            ['2', 'bob', 'ray', '', '2020/02/01', '60000', 'IT', ''],
            ['3', 'cat', 'kim', 'cat@x.com', '01-Mar-2020', '', 'hr', '555-0002'],
            ['3', 'cat', 'kim', 'cat@x.com', '2019-03-01', '70000', 'Finance', '555-0002'],
        ])

        try:
            reader = EmployeeCSVReader(temp_file_path)
            chunks = list(reader.read_in_chunks(chunk_size=2))

            self.assertEqual(len(chunks), 2)
            self.assertEqual(len(chunks[0]), 2)
            self.assertEqual(len(chunks[1]), 2)
            self.assertEqual(reader.header, HEADER)

            first_record = chunks[0][0]
            self.assertEqual(first_record['employee_id'], 1)
            self.assertEqual(first_record['salary'], Decimal('50000'))
            self.assertEqual(first_record['email'], 'Ann@X.com')

            second_record = chunks[0][1]
            self.assertIsNone(second_record['email'])
            self.assertIsNone(second_record['phone_number'])
        finally:
            os.unlink(temp_file_path)

    def test_csv_reader_untyped_rows(self):
        temp_file_path = write_csv([['employee_id', 'salary'], ['7', '']])
        try:
            chunks = list(EmployeeCSVReader(temp_file_path).read_in_chunks(10, typed=False))
            self.assertEqual(chunks, [[{'employee_id': '7', 'salary': ''}]])
        finally:
            os.unlink(temp_file_path)

    def test_csv_reader_file_not_found(self):
        reader = EmployeeCSVReader("non_existent_file.csv")

        with self.assertRaises(FileNotFoundError):
            list(reader.read_in_chunks(chunk_size=10))

    def test_csv_reader_empty_file(self):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False) as f:
            temp_file_path = f.name

        try:
            reader = EmployeeCSVReader(temp_file_path)
            chunks = list(reader.read_in_chunks(chunk_size=10))
            self.assertEqual(len(chunks), 0)
        finally:
            os.unlink(temp_file_path)

    def test_csv_reader_read_all(self):
        temp_file_path = write_csv([['employee_id'], ['1'], ['2'], ['3']])
        try:
            records = EmployeeCSVReader(temp_file_path).read_all(chunk_size=2)
            self.assertEqual([r['employee_id'] for r in records], [1, 2, 3])
        finally:
            os.unlink(temp_file_path)

    def test_parse_raw_record(self):
        record = parse_raw_record({
            'employee_id': ' 42 ',
            'first_name': '  jOHN ',
            'salary': '1,250,000.00',
            'hire_date': '2020-01-01',
            'department_id': '',
        })
        self.assertEqual(record['employee_id'], 42)
        self.assertEqual(record['first_name'], '  jOHN ')
        self.assertEqual(record['salary'], Decimal('1250000.00'))
        self.assertEqual(record['hire_date'], '2020-01-01')
        self.assertIsNone(record['department_id'])

    def test_parse_raw_record_bad_values(self):
        record = parse_raw_record({'employee_id': 'E-1', 'salary': 'lots'})
        self.assertEqual(record['employee_id'], 'E-1')
        self.assertIsNone(record['salary'])


if __name__ == '__main__':
    unittest.main()
