"""
Processing Result Value Object

Value object representing the outcome of processing one job file.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ProcessingResult:
    """
    Value object representing the result of processing a job.

    Attributes:
        success: Whether the job completed
        job_id: Identifier of the job
        final_path: Where the file was placed (if successful)
        error_message: Technical error message (if failed)
        error_type: ErrorCategory value (if failed)
        recorded: Whether a terminal record was written for the job
    """
    success: bool
    job_id: str
    final_path: Optional[str] = None
    error_message: Optional[str] = None
    error_type: Optional[str] = None
    recorded: bool = True
