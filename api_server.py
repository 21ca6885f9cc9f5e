# ========================
# api_server.py
# ========================

"""
FastAPI Server for the Employee Data Cleaning Pipeline

Provides REST API endpoints for uploading employee exports, cleaning them and
downloading the cleaned tables and reports.
"""

import uuid
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional

from fastapi import FastAPI, File, UploadFile, HTTPException, BackgroundTasks, Query
from fastapi.responses import FileResponse
import uvicorn

from src.employee_cleaning import EmployeeDataJob
from src.employee_cleaning.orchestrator import POLICIES
from src.utils.config import Config
from src.utils.logging_setup import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Employee Data Cleaning API",
    description="Upload employee exports and run them through the cleaning pipeline",
    version="1.0.0"
)

config = Config()

# Global state for tracking jobs
job_status: Dict[str, Dict[str, Any]] = {}

JOB_NOT_FOUND_MSG = "Job not found"
JOB_NOT_COMPLETED_MSG = "Job not completed yet"


class CleaningJobManager:
    """Runs cleaning jobs in the background and records their outcome."""

    @staticmethod
    def run_job(job_id: str, input_file: str, output_dir: str, policy: str) -> None:
        try:
            logger.info(f"Starting cleaning job {job_id}")
            job_status[job_id]['status'] = 'processing'
            job_status[job_id]['started_at'] = datetime.now().isoformat()

            job = EmployeeDataJob(
                input_file=input_file,
                output_dir=output_dir,
                chunk_size=config.DEFAULT_CHUNK_SIZE,
                config=config,
                policy=policy
            )
            if not job.validate_input():
                raise ValueError("Input file validation failed")

            results = job.run()

            job_status[job_id]['status'] = 'completed'
            job_status[job_id]['completed_at'] = datetime.now().isoformat()
            job_status[job_id]['results'] = {
                'saved_files': results['saved_files'],
                'record_counts': results['record_counts'],
                'cleaning_stats': results['cleaning_stats'],
            }
            logger.info(f"Cleaning job {job_id} completed successfully")

        except Exception as e:
            logger.error(f"Cleaning job {job_id} failed: {e}", exc_info=True)
            job_status[job_id]['status'] = 'failed'
            job_status[job_id]['error'] = str(e)
            job_status[job_id]['failed_at'] = datetime.now().isoformat()


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Employee Data Cleaning API",
        "version": "1.0.0",
        "endpoints": {
            "upload": "/upload - Upload an employee CSV export",
            "status": "/status/{job_id} - Check job status",
            "jobs": "/jobs - List all jobs",
            "download": "/download/{job_id}?file_type= - Download a job output",
            "health": "/health - Health check",
            "api_docs": "/docs - API documentation"
        },
        "policies": list(POLICIES)
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "active_jobs": len([j for j in job_status.values() if j['status'] == 'processing'])
    }


@app.post("/upload")
async def upload_file(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    policy: str = Query('full', description="Cleaning policy: full or procedure")
):
    """
    Upload an employee CSV export and start a cleaning job.

    Args:
        file: CSV file to upload
        policy: 'full' drops records without a salary, 'procedure' fills them with 0

    Returns:
        dict: Job ID and status information
    """
    if not file.filename or not file.filename.lower().endswith('.csv'):
        raise HTTPException(status_code=400, detail="Only CSV files are supported")
    if policy not in POLICIES:
        raise HTTPException(status_code=400, detail=f"Unknown policy '{policy}'")

    job_id = str(uuid.uuid4())

    upload_dir = Path(config.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    file_path = upload_dir / f"{job_id}_{Path(file.filename).name}"
    content = await file.read()
    file_path.write_bytes(content)

    output_dir = Path(config.DEFAULT_OUTPUT_DIR) / job_id
    output_dir.mkdir(parents=True, exist_ok=True)

    job_status[job_id] = {
        'job_id': job_id,
        'filename': file.filename,
        'status': 'queued',
        'policy': policy,
        'created_at': datetime.now().isoformat(),
        'input_file': str(file_path),
        'output_dir': str(output_dir),
        'file_size': len(content)
    }

    background_tasks.add_task(
        CleaningJobManager.run_job,
        job_id,
        str(file_path),
        str(output_dir),
        policy
    )
    logger.info(f"Queued cleaning job {job_id} for file {file.filename}")

    return {
        "job_id": job_id,
        "filename": file.filename,
        "status": "queued",
        "policy": policy,
        "message": "File uploaded successfully. Cleaning started."
    }


@app.get("/status/{job_id}")
async def get_job_status(job_id: str):
    if job_id not in job_status:
        raise HTTPException(status_code=404, detail=JOB_NOT_FOUND_MSG)
    return job_status[job_id]


@app.get("/jobs")
async def list_jobs(
    status: Optional[str] = Query(None, description="Filter by status: queued, processing, completed, failed"),
    limit: int = Query(50, description="Maximum number of jobs to return", ge=1, le=100)
):
    jobs = list(job_status.values())
    if status:
        jobs = [job for job in jobs if job['status'] == status]

    jobs.sort(key=lambda x: x['created_at'], reverse=True)
    jobs = jobs[:limit]

    return {
        "jobs": jobs,
        "total_count": len(job_status),
        "filtered_count": len(jobs)
    }


@app.get("/download/{job_id}")
async def download_results(job_id: str, file_type: str = Query(..., description="Type of file to download")):
    """
    Download one output of a completed job, e.g. file_type=employees.
    """
    if job_id not in job_status:
        raise HTTPException(status_code=404, detail=JOB_NOT_FOUND_MSG)

    job = job_status[job_id]
    if job['status'] != 'completed':
        raise HTTPException(status_code=400, detail=JOB_NOT_COMPLETED_MSG)

    saved_files = job['results']['saved_files']
    if file_type not in saved_files:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown file type '{file_type}'. Available: {sorted(saved_files)}"
        )

    file_path = Path(saved_files[file_type])
    if not file_path.exists():
        raise HTTPException(status_code=404, detail=f"File for '{file_type}' no longer exists")

    media_type = {'.csv': 'text/csv', '.json': 'application/json'}.get(file_path.suffix, 'text/markdown')
    return FileResponse(path=file_path, media_type=media_type, filename=file_path.name)


def start_server(host: str = "0.0.0.0", port: int = config.API_PORT, reload: bool = False):
    """Start the FastAPI server."""
    logger.info(f"Starting Employee Data Cleaning API server on {host}:{port}")
    uvicorn.run(
        "api_server:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )


if __name__ == "__main__":
    start_server(reload=True)
