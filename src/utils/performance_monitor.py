# ========================
# src/utils/performance_monitor.py
# ========================

"""
Performance Monitoring Utilities

Tracks run time, memory usage and per-step checkpoints for cleaning runs.
"""

import time
import os
import logging
from contextlib import contextmanager
from typing import Dict, Any, Optional

import psutil

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Performance monitoring utility for the cleaning pipeline.
    Tracks memory usage, processing time and throughput.
    """

    def __init__(self, name: str = "Pipeline"):
        """
        Initialize performance monitor.

        Args:
            name (str): Name for this monitoring session
        """
        self.name = name
        self.start_time = None
        self.end_time = None
        self.peak_memory_mb = 0.0
        self.records_processed = 0
        self.checkpoints = []

        logger.debug(f"PerformanceMonitor initialized: {name}")

    def start_monitoring(self) -> None:
        self.start_time = time.time()
        self.peak_memory_mb = self._get_memory_usage_mb()

        logger.info(f"{self.name} - Performance monitoring started")
        logger.debug(f"Initial memory usage: {self.peak_memory_mb:.2f} MB")

    def update_progress(self, records: int) -> None:
        """
        Update progress tracking.

        Args:
            records (int): Number of records handled since the last update
        """
        self.records_processed += records
        self.peak_memory_mb = max(self.peak_memory_mb, self._get_memory_usage_mb())

    def add_checkpoint(self, name: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Add a performance checkpoint.

        Args:
            name (str): Checkpoint name
            metadata (dict): Optional metadata to store
        """
        memory_mb = self._get_memory_usage_mb()
        self.peak_memory_mb = max(self.peak_memory_mb, memory_mb)
        checkpoint = {
            'name': name,
            'timestamp': time.time(),
            'memory_mb': memory_mb,
            'metadata': metadata or {}
        }
        self.checkpoints.append(checkpoint)
        logger.debug(f"Checkpoint '{name}': {checkpoint}")

    def stop_monitoring(self) -> Dict[str, Any]:
        """
        Stop monitoring and return performance summary.

        Returns:
            dict: Performance statistics
        """
        self.end_time = time.time()
        summary = self.get_current_stats()
        summary['name'] = self.name
        summary['checkpoints'] = self.checkpoints

        logger.info(
            f"{self.name} - finished in {summary['elapsed_seconds']:.2f}s, "
            f"{summary['records_processed']:,} records, "
            f"peak memory {summary['peak_memory_mb']:.2f} MB"
        )
        return summary

    def _get_memory_usage_mb(self) -> float:
        """Get current resident memory of this process in MB."""
        try:
            memory_bytes = psutil.Process(os.getpid()).memory_info().rss
        except psutil.Error as e:
            logger.debug(f"Could not get memory usage: {e}")
            return 0.0
        return memory_bytes / (1024 * 1024)

    def get_current_stats(self) -> Dict[str, Any]:
        """Get current performance statistics."""
        end = self.end_time or time.time()
        elapsed = end - self.start_time if self.start_time else 0

        return {
            'elapsed_seconds': elapsed,
            'records_processed': self.records_processed,
            'peak_memory_mb': self.peak_memory_mb,
            'throughput_records_per_second': self.records_processed / elapsed if elapsed > 0 else 0
        }


@contextmanager
def monitor_performance(name: str = "Pipeline"):
    """
    Context manager for easy performance monitoring.

    Args:
        name (str): Name for this monitoring session

    Yields:
        PerformanceMonitor: Monitor instance
    """
    monitor = PerformanceMonitor(name)
    monitor.start_monitoring()
    try:
        yield monitor
    finally:
        monitor.stop_monitoring()
