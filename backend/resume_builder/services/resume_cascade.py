"""
Multi-layer resume parsing.

Layer 1 asks the AI parser, layer 2 falls back to the rule-based parser,
layer 3 hands back the empty record for manual entry. The cascade never
raises: whatever happens, the caller gets a well-formed record.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from ..schemas.resume import ParsingMethod
from .heuristic_parser import parse_resume_heuristic
from .resume_parser import parse_resume_with_gemini
from .resume_sanitizer import default_resume, is_plausible, sanitize_resume
from .text_extractor import PDF_TYPE, extract_text, resolve_content_type

logger = logging.getLogger(__name__)

AIExtractor = Callable[[str, Optional[bytes]], Awaitable[dict]]
HeuristicExtractor = Callable[[str], dict]

PARSING_MESSAGES = {
    ParsingMethod.AI: "Resume uploaded and parsed successfully with AI!",
    ParsingMethod.HEURISTIC: (
        "Resume uploaded. AI parsing unavailable, details were extracted automatically. "
        "Please review and edit."
    ),
    ParsingMethod.MANUAL: (
        "File uploaded but could not be parsed automatically. "
        "Please fill in your information manually."
    ),
}


@dataclass
class ParseOutcome:
    data: dict
    method: ParsingMethod
    warnings: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return PARSING_MESSAGES[self.method]


async def _ai_extractor(text: str, pdf_bytes: Optional[bytes]) -> dict:
    return await parse_resume_with_gemini(text, pdf_bytes=pdf_bytes)


class ResumeExtractionCascade:
    """
    Ordered fallback over the extraction strategies.

    Both strategies are injectable; the defaults are the Gemini parser and the
    rule-based parser. Text extraction and the rule-based parser are CPU bound
    and run in a worker thread.
    """

    def __init__(
        self,
        ai_extractor: Optional[AIExtractor] = None,
        heuristic_extractor: Optional[HeuristicExtractor] = None,
    ):
        self.ai_extractor = ai_extractor or _ai_extractor
        self.heuristic_extractor = heuristic_extractor or parse_resume_heuristic

    async def parse_document(self, content: bytes, content_type: str, filename: str = "") -> ParseOutcome:
        """Extract text from an uploaded file and run the cascade on it."""
        warnings = []
        resolved = resolve_content_type(content_type, filename)
        try:
            text = await asyncio.to_thread(extract_text, content, resolved, filename)
            logger.info(f"Text extracted from {filename or 'upload'}: {len(text)} characters")
        except Exception as e:
            logger.warning(f"Text extraction failed for {filename or 'upload'}: {e}")
            warnings.append(f"text extraction: {getattr(e, 'message', str(e))}")
            text = ""

        pdf_bytes = content if resolved == PDF_TYPE else None
        outcome = await self.parse_text(text, pdf_bytes=pdf_bytes)
        outcome.warnings = warnings + outcome.warnings
        return outcome

    async def parse_text(self, text: str, pdf_bytes: Optional[bytes] = None) -> ParseOutcome:
        """Run the three layers against raw text. Never raises."""
        text = text or ""
        warnings = []

        # LAYER 1: AI-powered parsing (best quality)
        if text.strip() or pdf_bytes:
            logger.info("Layer 1: attempting AI-powered parsing")
            try:
                data = sanitize_resume(await self.ai_extractor(text, pdf_bytes))
                if is_plausible(data):
                    logger.info("Layer 1 succeeded: AI parsing completed")
                    return ParseOutcome(data=data, method=ParsingMethod.AI, warnings=warnings)
                warnings.append("ai: AI parsing returned no usable data")
                logger.warning("Layer 1 failed: AI parsing returned no usable data")
            except Exception as e:
                warnings.append(f"ai: {getattr(e, 'message', str(e))}")
                logger.warning(f"Layer 1 failed: {e}")

        # LAYER 2: rule-based extraction from the text
        if text.strip():
            logger.info("Layer 2: attempting heuristic extraction")
            try:
                data = sanitize_resume(await asyncio.to_thread(self.heuristic_extractor, text))
                if is_plausible(data):
                    logger.info("Layer 2 succeeded: heuristic extraction completed")
                    return ParseOutcome(data=data, method=ParsingMethod.HEURISTIC, warnings=warnings)
                warnings.append("heuristic: nothing recognisable in the text")
                logger.warning("Layer 2 failed: nothing recognisable in the text")
            except Exception as e:
                warnings.append(f"heuristic: {e}")
                logger.exception("Layer 2 failed with an unexpected error")

        # LAYER 3: empty structure for manual entry
        logger.info("Layer 3: using manual entry fallback")
        return ParseOutcome(data=default_resume(), method=ParsingMethod.MANUAL, warnings=warnings)


_cascade: Optional[ResumeExtractionCascade] = None


def get_extraction_cascade() -> ResumeExtractionCascade:
    """FastAPI dependency; tests override it with injected extractors."""
    global _cascade
    if _cascade is None:
        _cascade = ResumeExtractionCascade()
    return _cascade
