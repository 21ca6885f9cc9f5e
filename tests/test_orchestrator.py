# ========================
# tests/test_orchestrator.py
# ========================

import unittest
import tempfile
import shutil
import json
import csv
import os
import sys
from pathlib import Path

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.employee_cleaning.errors import StoreUnavailable
from src.employee_cleaning.orchestrator import EmployeeDataJob
from src.utils.config import Config
from src.utils.data_generator import EmployeeDataGenerator, EXPORT_HEADER


def read_csv(path):
    with open(path, newline='', encoding='utf-8') as f:
        return list(csv.DictReader(f))


class TestEmployeeDataJob(unittest.TestCase):
    """End-to-end runs from a raw CSV to the cleaned outputs."""

    def setUp(self):
        self.work_dir = tempfile.mkdtemp()
        self.input_file = os.path.join(self.work_dir, 'raw', 'employees.csv')
        self.output_dir = os.path.join(self.work_dir, 'out')
        self.generation_stats = EmployeeDataGenerator(seed=7).generate_dataset(
            self.input_file, num_rows=200, error_rate=0.3
        )

    def tearDown(self):
        shutil.rmtree(self.work_dir, ignore_errors=True)

    def test_generator_output(self):
        rows = read_csv(self.input_file)
        self.assertEqual(list(rows[0].keys()), EXPORT_HEADER)
        self.assertGreaterEqual(len(rows), 200)
        self.assertGreater(self.generation_stats['records_with_errors'], 0)

    def test_full_policy(self):
        job = EmployeeDataJob(self.input_file, self.output_dir, chunk_size=50)
        self.assertTrue(job.validate_input())

        results = job.run()

        self.assertEqual(results['pipeline_status'], 'completed')
        for name in ['employees', 'departments', 'parse_failures', 'summary',
                     'data_dictionary', 'duplicate_employees', 'missing_values',
                     'salary_outliers', 'invalid_emails', 'avg_salary_by_department']:
            self.assertIn(name, results['saved_files'])
            self.assertTrue(Path(results['saved_files'][name]).exists(), name)

        employees = read_csv(results['saved_files']['employees'])
        self.assertEqual(len(employees), results['record_counts']['records_out'])
        self.assertNotIn('department', employees[0])

        ids = [row['employee_id'] for row in employees]
        self.assertEqual(len(ids), len(set(ids)))

        department_ids = {row['department_id'] for row in read_csv(results['saved_files']['departments'])}
        for row in employees:
            self.assertTrue(row['email'])
            self.assertEqual(row['email'], row['email'].lower())
            self.assertTrue(0 <= float(row['salary']) <= 1000000)
            self.assertTrue(row['phone_number'].isdigit())
            self.assertEqual(row['first_name'], row['first_name'].strip())
            if row['department_id']:
                self.assertIn(row['department_id'], department_ids)

        departments = [row['department_name'] for row in read_csv(results['saved_files']['departments'])]
        self.assertNotIn('HR', departments)
        self.assertNotIn('IT', departments)

        with open(results['saved_files']['summary'], encoding='utf-8') as f:
            summary = json.load(f)
        self.assertEqual(summary['policy'], 'full')
        self.assertEqual(summary['record_counts'], results['record_counts'])

    def test_procedure_policy(self):
        job = EmployeeDataJob(self.input_file, self.output_dir, policy='procedure')
        results = job.run()

        employees = read_csv(results['saved_files']['employees'])
        self.assertIn('department', employees[0])
        self.assertTrue(all(row['salary'] != '' for row in employees))
        self.assertEqual(results['cleaning_stats']['salaries_dropped'], 0)

    def test_profiling_can_be_disabled(self):
        config = Config({'enable_data_profiling': False})
        results = EmployeeDataJob(self.input_file, self.output_dir, config=config).run()
        self.assertEqual(results['profile'], {})
        self.assertNotIn('missing_values', results['saved_files'])

    def test_unknown_policy(self):
        with self.assertRaises(ValueError):
            EmployeeDataJob(self.input_file, self.output_dir, policy='sometimes')

    def test_missing_input(self):
        job = EmployeeDataJob(os.path.join(self.work_dir, 'nope.csv'), self.output_dir)
        self.assertFalse(job.validate_input())
        with self.assertRaises(StoreUnavailable):
            job.run()


if __name__ == '__main__':
    unittest.main()
