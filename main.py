#!/usr/bin/env python3
# ========================
# main.py
# ========================

"""
Main Entry Point for the Employee Data Cleaning Pipeline

Generates a dirty sample export, cleans it and writes the cleaned tables and
data quality reports.
"""

import sys
import logging
from pathlib import Path

from src.employee_cleaning import EmployeeDataJob, CleaningError
from src.utils import Config, setup_logging, EmployeeDataGenerator


def main():
    """Main execution function."""
    config = Config()

    setup_logging(
        log_level=config.LOG_LEVEL,
        log_file="pipeline.log",
        log_dir="logs"
    )

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("EMPLOYEE DATA CLEANING PIPELINE - MAIN EXECUTION")
    logger.info("=" * 60)

    invalid = [name for name, ok in config.validate_config().items() if not ok]
    if invalid:
        logger.error(f"Invalid configuration settings: {invalid}")
        return 1
    logger.debug(str(config))

    try:
        config.ensure_directories()

        input_file = config.DEFAULT_INPUT_FILE
        logger.info("Step 1: Generating sample data...")

        generator = EmployeeDataGenerator(seed=42)
        generation_stats = generator.generate_dataset(
            file_path=input_file,
            num_rows=config.DEFAULT_SAMPLE_ROWS,
            error_rate=0.15
        )
        logger.info(f"Sample data generated: {generation_stats}")

        logger.info("Step 2: Running cleaning job...")
        job = EmployeeDataJob(
            input_file=input_file,
            output_dir=config.DEFAULT_OUTPUT_DIR,
            chunk_size=config.DEFAULT_CHUNK_SIZE,
            config=config
        )

        if not job.validate_input():
            logger.error("Input validation failed. Exiting.")
            return 1

        results = job.run()

        logger.info("Step 3: Execution summary")
        _print_execution_summary(results, generation_stats)

        logger.info("Cleaning completed successfully!")
        return 0

    except CleaningError as e:
        logger.error(f"Cleaning failed, no changes kept: {e}", exc_info=True)
        return 1
    except Exception as e:
        logger.error(f"Pipeline execution failed: {e}", exc_info=True)
        return 1


def _print_execution_summary(results: dict, generation_stats: dict) -> None:
    """Print final execution summary."""
    counts = results['record_counts']
    stats = results['cleaning_stats']

    print("\n" + "=" * 70)
    print("CLEANING EXECUTION SUMMARY")
    print("=" * 70)

    print("Data Generation:")
    print(f"   • Records generated: {generation_stats['total_rows']:,}")
    print(f"   • Records with injected errors: {generation_stats['records_with_errors']:,}")

    print("\nCleaning:")
    print(f"   • Records in: {counts['records_in']:,}")
    print(f"   • Records out: {counts['records_out']:,}")
    print(f"   • Duplicates removed: {stats['duplicates_removed']:,}")
    print(f"   • Missing salaries dropped: {stats['salaries_dropped']:,}")
    print(f"   • Salaries capped: {stats['salaries_capped']:,}")
    print(f"   • Departments: {counts['departments']}")
    print(f"   • Unparseable hire dates: {stats['parse_failures']:,}")

    print("\nGenerated Outputs:")
    for dataset_type, file_path in results['saved_files'].items():
        print(f"   • {dataset_type.replace('_', ' ').title()}: {Path(file_path).name}")

    print("=" * 70)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
