# ========================
# tests/test_api_integration.py
# ========================

import unittest
import tempfile
import shutil
import os
import sys

from fastapi.testclient import TestClient

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import api_server

TEST_CSV = """employee_id,first_name,last_name,email,hire_date,salary,department,phone_number
1,  jOHN ,smith,John@EXAMPLE.com,2019-05-01,2500000,HR,(123) 456-7890
1,john,smith,john@example.com,2021-05-01,90000,hr,123.456.7890
2,mary,jones,,03/15/2018,75000,Human Resources,
3,wei,chen,wei@company.com,2020/07/01,,IT,555-0100
"""


class TestAPIIntegration(unittest.TestCase):
    """
    Integration tests for the API server endpoints, run in-process.
    """

    def setUp(self):
        self.work_dir = tempfile.mkdtemp()
        api_server.config.DEFAULT_OUTPUT_DIR = os.path.join(self.work_dir, 'processed')
        api_server.config.UPLOAD_DIR = os.path.join(self.work_dir, 'uploaded')
        api_server.job_status.clear()
        self.client = TestClient(api_server.app)

    def tearDown(self):
        shutil.rmtree(self.work_dir, ignore_errors=True)

    def _upload(self, policy='full', filename='employees.csv', content=TEST_CSV):
        files = {'file': (filename, content.encode('utf-8'), 'text/csv')}
        return self.client.post(f"/upload?policy={policy}", files=files)

    def test_health_endpoint(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertEqual(data["status"], "healthy")
        self.assertIn("timestamp", data)
        self.assertEqual(data["active_jobs"], 0)

    def test_root_endpoint(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertIn("endpoints", data)
        self.assertEqual(data["policies"], ["full", "procedure"])

    def test_upload_and_download(self):
        response = self._upload()
        self.assertEqual(response.status_code, 200)

        upload_data = response.json()
        self.assertEqual(upload_data["status"], "queued")
        self.assertEqual(upload_data["filename"], "employees.csv")
        job_id = upload_data["job_id"]

        # Background tasks finish before the test client returns
        status_data = self.client.get(f"/status/{job_id}").json()
        self.assertEqual(status_data["status"], "completed", status_data.get("error"))
        self.assertEqual(status_data["results"]["record_counts"]["records_out"], 2)

        download = self.client.get(f"/download/{job_id}", params={"file_type": "employees"})
        self.assertEqual(download.status_code, 200)
        lines = download.text.strip().splitlines()
        self.assertEqual(len(lines), 3)
        self.assertIn("John,Smith,john@example.com,2019-05-01,1000000,1234567890", lines[1])

        departments = self.client.get(f"/download/{job_id}", params={"file_type": "departments"})
        self.assertIn("Human Resources", departments.text)
        self.assertNotIn("hr", departments.text.splitlines()[1:])

    def test_upload_procedure_policy(self):
        job_id = self._upload(policy='procedure').json()["job_id"]
        status_data = self.client.get(f"/status/{job_id}").json()

        self.assertEqual(status_data["status"], "completed")
        self.assertEqual(status_data["results"]["record_counts"]["records_out"], 3)
        self.assertEqual(status_data["results"]["cleaning_stats"]["salaries_filled"], 1)

    def test_upload_rejects_non_csv(self):
        response = self._upload(filename='employees.txt')
        self.assertEqual(response.status_code, 400)

    def test_upload_rejects_unknown_policy(self):
        response = self._upload(policy='maybe')
        self.assertEqual(response.status_code, 400)

    def test_list_jobs(self):
        self._upload()
        self._upload(policy='procedure')

        data = self.client.get("/jobs", params={"status": "completed"}).json()
        self.assertEqual(data["total_count"], 2)
        self.assertEqual(data["filtered_count"], 2)

    def test_unknown_job(self):
        self.assertEqual(self.client.get("/status/missing").status_code, 404)
        response = self.client.get("/download/missing", params={"file_type": "employees"})
        self.assertEqual(response.status_code, 404)

    def test_unknown_file_type(self):
        job_id = self._upload().json()["job_id"]
        response = self.client.get(f"/download/{job_id}", params={"file_type": "nope"})
        self.assertEqual(response.status_code, 404)


if __name__ == '__main__':
    unittest.main()
