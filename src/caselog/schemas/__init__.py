"""
Pydantic schemas for input and output data.

These schemas define the structure of data passed in from moderators and
returned to callers for serialization and validation.
"""

from .case_log import CaseLogResponse, CaseNoteResponse, CaseResponse
from .warn import WarnSubmitInput

__all__ = [
    "CaseLogResponse", "CaseNoteResponse", "CaseResponse",
    "WarnSubmitInput",
]
