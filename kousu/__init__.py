"""
kousu - Read and write the MA-EYES work log.

This package drives the MA-EYES web application with Playwright to export
the monthly work log (工数実績) to a versioned JSON file and to write such a
file back into the weekly project-hours grid.
"""

__version__ = '3.0.0'

from .models import Document, WorkDay, PutSummary
from .errors import KousuError, ValidationError, StructuralError
from .schema import load_document, dump_document, write_document
from .config import Config
from .ma_eyes import run_get_operation, run_put_operation, run_import_kinmu_operation

__all__ = [
    'Document',
    'WorkDay',
    'PutSummary',
    'KousuError',
    'ValidationError',
    'StructuralError',
    'load_document',
    'dump_document',
    'write_document',
    'Config',
    'run_get_operation',
    'run_put_operation',
    'run_import_kinmu_operation',
]
