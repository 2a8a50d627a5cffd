from .resume import (
    StructuredResume,
    ParsingMethod,
    ParseResponse,
    ResumeCreate,
    ResumeUpdate,
    ResumeResponse
)

__all__ = [
    "StructuredResume",
    "ParsingMethod",
    "ParseResponse",
    "ResumeCreate",
    "ResumeUpdate",
    "ResumeResponse"
]
