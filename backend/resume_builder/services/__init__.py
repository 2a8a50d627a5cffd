from .resume_sanitizer import (
    default_resume,
    sanitize_resume,
    is_plausible,
    merge_resume_records
)
from .text_extractor import (
    validate_upload,
    extract_text,
    clean_extracted_text
)
from .gemini_client import (
    GeminiClient,
    get_gemini_client,
    reset_gemini_client
)
from .resume_parser import (
    parse_resume_with_gemini,
    extract_json_object,
    normalize_gemini_output
)
from .heuristic_parser import parse_resume_heuristic
from .resume_cascade import (
    ParseOutcome,
    ResumeExtractionCascade,
    get_extraction_cascade
)

__all__ = [
    # Validation / defaulting
    "default_resume",
    "sanitize_resume",
    "is_plausible",
    "merge_resume_records",
    # Text extraction
    "validate_upload",
    "extract_text",
    "clean_extracted_text",
    # Gemini
    "GeminiClient",
    "get_gemini_client",
    "reset_gemini_client",
    # Resume parsing
    "parse_resume_with_gemini",
    "extract_json_object",
    "normalize_gemini_output",
    "parse_resume_heuristic",
    # Cascade
    "ParseOutcome",
    "ResumeExtractionCascade",
    "get_extraction_cascade"
]
