"""
Utility functions for the webpress service.
"""
from webpress.utils.metrics import (
    get_cpu_mem,
    measure_size_reduction,
    PerformanceTimer
)

from webpress.utils.file_handling import (
    get_temp_filepath,
    get_unique_filepath,
    safe_remove,
    ensure_dir
)

__all__ = [
    # Metrics utilities
    'get_cpu_mem',
    'measure_size_reduction',
    'PerformanceTimer',

    # File handling utilities
    'get_temp_filepath',
    'get_unique_filepath',
    'safe_remove',
    'ensure_dir'
]
