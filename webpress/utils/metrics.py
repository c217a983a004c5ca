"""
Utilities for measuring conversion performance and system load.
"""
import time
import logging
from typing import Dict

import psutil

# Set up logging
logger = logging.getLogger(__name__)


def get_cpu_mem() -> Dict[str, float]:
    """
    Get current CPU and memory usage.

    Returns:
        Dictionary with CPU and memory usage percentages
    """
    return {
        "cpu_usage": psutil.cpu_percent(interval=None),
        "memory_usage": psutil.virtual_memory().percent
    }


def measure_size_reduction(original_size: int, converted_size: int) -> Dict[str, float]:
    """
    Calculate how much a conversion shrank a file.

    Args:
        original_size: Size of the source file in bytes
        converted_size: Size of the converted file in bytes

    Returns:
        Dictionary with compression ratio and space savings percentage
    """
    compression_ratio = original_size / converted_size if converted_size > 0 else 0
    space_savings = (1 - (converted_size / original_size)) * 100 if original_size > 0 else 0

    return {
        "compression_ratio": round(compression_ratio, 2),
        "space_savings_percent": round(space_savings, 2)
    }


class PerformanceTimer:
    """
    Context manager for measuring execution time.

    Example:
        with PerformanceTimer() as timer:
            # Code to measure
        execution_time = timer.execution_time
    """

    def __init__(self):
        self.start_time = None
        self.execution_time = 0

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.execution_time = time.time() - self.start_time
        return False  # Don't suppress exceptions
