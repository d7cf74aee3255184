"""
explosive Utilities Module

Input preparation shared by the statistic and critical value entry points.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("explosive.utils")

from .data import PreparedData, find_date_column, prepare_data

__all__ = [
    'PreparedData',
    'find_date_column',
    'prepare_data',
]
