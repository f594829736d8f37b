"""
Utils module - helpers shared by the pipeline.
"""

from capturevault.utils.validators import (
    ValidationError,
    may_be_same_file,
    validate_submission_path,
)

__all__ = [
    "ValidationError",
    "may_be_same_file",
    "validate_submission_path",
]
