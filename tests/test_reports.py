# ========================
# tests/test_reports.py
# ========================

import unittest
import copy
import sys
import os
from datetime import date
from decimal import Decimal

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.employee_cleaning.cleaning import EmployeeCleaner
from src.employee_cleaning.reports import EmployeeReports, EMAIL_PATTERN
from src.employee_cleaning.store import EmployeeTable


class TestEmployeeReports(unittest.TestCase):

    def setUp(self):
        self.table = EmployeeTable([
            {'employee_id': 1, 'email': 'a@company.com', 'salary': Decimal('100'),
             'department': 'Sales', 'hire_date': '2020-01-01'},
            {'employee_id': 1, 'email': 'a@company.com', 'salary': Decimal('300'),
             'department': 'Sales', 'hire_date': 'soon'},
            {'employee_id': 2, 'email': None, 'salary': Decimal('2000000'),
             'department': 'IT', 'hire_date': None},
            {'employee_id': 3, 'email': 'not-an-email', 'salary': None,
             'department': None, 'hire_date': '2021/02/03'},
            {'employee_id': 4, 'email': 'd@company', 'salary': Decimal('50'),
             'department': None, 'hire_date': '2021-02-03'},
        ])
        self.reports = EmployeeReports(self.table)

    def test_find_duplicates(self):
        self.assertEqual(self.reports.find_duplicates(), [{'employee_id': 1, 'count': 2}])

    def test_find_missing_values(self):
        ids = [r['employee_id'] for r in self.reports.find_missing_values()]
        self.assertEqual(ids, [2, 3])

    def test_find_salary_outliers(self):
        ids = [r['employee_id'] for r in self.reports.find_salary_outliers()]
        self.assertEqual(ids, [2])
        ids = [r['employee_id'] for r in self.reports.find_salary_outliers(threshold=200)]
        self.assertEqual(ids, [1, 2])

    def test_find_invalid_emails(self):
        ids = [r['employee_id'] for r in self.reports.find_invalid_emails()]
        self.assertEqual(ids, [3, 4])

    def test_email_pattern(self):
        valid = ['john.doe@example.com', 'a+b@sub.domain.org', 'x_y%z@d-1.io']
        invalid = ['john@example', 'john at example.com', '@example.com', 'john@example.c']
        for email in valid:
            self.assertIsNotNone(EMAIL_PATTERN.match(email), email)
        for email in invalid:
            self.assertIsNone(EMAIL_PATTERN.match(email), email)

    def test_average_salary_by_department(self):
        rows = {r['department']: r for r in self.reports.average_salary_by_department()}

        self.assertEqual(rows['Sales']['avg_salary'], Decimal('200'))
        self.assertEqual(rows['Sales']['employee_count'], 2)
        self.assertEqual(rows['IT']['avg_salary'], Decimal('2000000'))
        # Missing salaries are ignored, the null department is its own group
        self.assertEqual(rows[None]['avg_salary'], Decimal('50'))
        self.assertEqual(rows[None]['employee_count'], 2)

    def test_average_salary_after_normalization(self):
        EmployeeCleaner().normalize_departments(self.table)
        rows = {r['department']: r['avg_salary']
                for r in EmployeeReports(self.table).average_salary_by_department()}
        self.assertEqual(rows['Sales'], Decimal('200'))
        self.assertIn(None, rows)

    def test_salary_with_default(self):
        rows = self.reports.salary_with_default()
        self.assertEqual(rows[3], {'employee_id': 3, 'salary': Decimal(0)})
        self.assertEqual(rows[0], {'employee_id': 1, 'salary': Decimal('100')})

    def test_hire_dates_as_dates(self):
        rows = self.reports.hire_dates_as_dates()
        self.assertEqual([r['hire_date'] for r in rows],
                         [date(2020, 1, 1), None, None, date(2021, 2, 3), date(2021, 2, 3)])

    def test_reports_do_not_mutate(self):
        before = copy.deepcopy(self.table.read_all())
        results = self.reports.run_all()
        results['missing_values'][0]['email'] = 'changed@x.com'

        self.assertEqual(self.table.read_all(), before)
        self.assertEqual(set(results), {
            'duplicate_employees', 'missing_values', 'salary_outliers',
            'invalid_emails', 'avg_salary_by_department'
        })


if __name__ == '__main__':
    unittest.main()
