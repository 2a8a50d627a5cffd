from .resume import Resume, ResumeStatus, ResumeTemplate

__all__ = [
    "Resume", "ResumeStatus", "ResumeTemplate",
]
