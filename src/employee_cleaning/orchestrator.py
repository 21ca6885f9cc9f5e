# ========================
# src/employee_cleaning/orchestrator.py
# ========================

"""
Cleaning Job Orchestrator Module

Coordinates a file-to-file cleaning run: load, profile, clean, save.
"""

import logging
from typing import Optional
from pathlib import Path

from .pipeline import CleaningPipeline, clean_employee_data
from .reports import EmployeeReports
from .storage import CleanedDataSaver
from .store import EmployeeTable
from ..utils.config import Config

logger = logging.getLogger(__name__)

POLICIES = ('full', 'procedure')


class EmployeeDataJob:
    """
    Cleans one employee CSV export and writes the results to a directory.

    policy='full' runs CleaningPipeline (records without a salary are dropped);
    policy='procedure' runs clean_employee_data (missing salaries become 0).
    """

    def __init__(self,
                 input_file: str,
                 output_dir: str,
                 chunk_size: int = 1000,
                 config: Optional[Config] = None,
                 policy: str = 'full'):
        """
        Initialize the cleaning job.

        Args:
            input_file (str): Path to input CSV file
            output_dir (str): Directory for output files
            chunk_size (int): Number of rows to read per chunk
            config (Config): Configuration object
            policy (str): 'full' or 'procedure'
        """
        if policy not in POLICIES:
            raise ValueError(f"Unknown cleaning policy '{policy}', expected one of {POLICIES}")

        self.input_file = input_file
        self.output_dir = output_dir
        self.chunk_size = chunk_size
        self.config = config or Config()
        self.policy = policy

        self.pipeline = CleaningPipeline(self.config)
        self.saver = CleanedDataSaver(self.output_dir)

        logger.info("EmployeeDataJob initialized:")
        logger.info(f"  Input: {self.input_file}")
        logger.info(f"  Output: {self.output_dir}")
        logger.info(f"  Policy: {self.policy}")

    def run(self) -> dict:
        """
        Execute the job from start to finish.

        Returns:
            dict: Summary of the run and the saved files
        """
        logger.info(f"Starting cleaning job for '{self.input_file}'...")

        table = EmployeeTable.from_csv(self.input_file, self.chunk_size)
        records_in = len(table)

        profile = {}
        if self.config.ENABLE_DATA_PROFILING:
            logger.info("Profiling raw data...")
            profile = EmployeeReports(table, self.config.SALARY_CAP).run_all()

        if self.policy == 'full':
            self.pipeline.run(table)
            cleaning_stats = self.pipeline.get_statistics()
        else:
            clean_employee_data(table, self.pipeline.cleaner)
            cleaning_stats = self.pipeline.cleaner.get_statistics()

        record_counts = {
            'records_in': records_in,
            'records_out': len(table),
            'records_removed': records_in - len(table),
            'departments': len(table.departments),
        }
        summary = {
            'input_file': self.input_file,
            'policy': self.policy,
            'record_counts': record_counts,
            'cleaning_stats': cleaning_stats,
            'profile_counts': {name: len(rows) for name, rows in profile.items()},
        }

        logger.info("Saving cleaned data...")
        saved_files = self.saver.save_all_data(
            table,
            reports=profile,
            parse_failures=self.pipeline.cleaner.parse_failures,
            summary=summary
        )
        saved_files['data_dictionary'] = self.saver.create_data_dictionary()

        results = {
            'pipeline_status': 'completed',
            'input_file': self.input_file,
            'output_directory': self.output_dir,
            'policy': self.policy,
            'saved_files': saved_files,
            'record_counts': record_counts,
            'cleaning_stats': cleaning_stats,
            'profile': profile,
        }

        self._log_final_summary(results)
        return results

    def _log_final_summary(self, results: dict) -> None:
        counts = results['record_counts']
        logger.info("=" * 60)
        logger.info("CLEANING JOB SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Input file: {results['input_file']}")
        logger.info(f"Policy: {results['policy']}")
        logger.info(f"Records in: {counts['records_in']:,}")
        logger.info(f"Records out: {counts['records_out']:,}")
        logger.info(f"Departments: {counts['departments']}")
        logger.info(f"Output files generated: {len(results['saved_files'])}")
        logger.info("=" * 60)

    def validate_input(self) -> bool:
        """
        Validate input file exists and is readable.

        Returns:
            bool: True if input is valid
        """
        input_path = Path(self.input_file)
        if not input_path.exists():
            logger.error(f"Input file does not exist: {self.input_file}")
            return False

        if not input_path.is_file():
            logger.error(f"Input path is not a file: {self.input_file}")
            return False

        try:
            with open(self.input_file, 'r', encoding='utf-8') as f:
                f.readline()
        except OSError as e:
            logger.error(f"Cannot read input file: {e}")
            return False

        logger.info(f"Input validation passed: {self.input_file}")
        return True
