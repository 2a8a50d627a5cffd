"""
Resume Parser Service using Gemini for structured data extraction.
Sends the resume text (or page images for scanned PDFs) to the model and
coerces its JSON answer into the structured resume record.
"""
import json
import logging
import re
from typing import Any, Dict, Optional

from google.genai import types

from ..config import get_settings
from ..exceptions import AIResponseParseError, AIServiceUnavailableError
from .gemini_client import GeminiClient, get_gemini_client
from .resume_sanitizer import SKILL_CATEGORIES, sanitize_resume
from .response_cache import make_cache_key
from .skill_vocabulary import normalize_skill_name
from .text_extractor import pdf_to_images

logger = logging.getLogger(__name__)

RESUME_PARSE_TEMPERATURE = 0.1
RESUME_PARSE_MAX_TOKENS = 8192


# ============================================================================
# Resume Parsing Prompt
# ============================================================================

RESUME_PARSER_PROMPT = """
══════════════════════════════════════════════════════════════════════════════
RESUME PARSER - STRUCTURED EXTRACTION
══════════════════════════════════════════════════════════════════════════════

You are an expert resume parser used by an ATS-friendly resume builder.
Extract the candidate's information from the resume below into EXACTLY this
JSON shape. Every key must be present.

{
  "personalInfo": {
    "fullName": "", "jobTitle": "", "email": "", "phone": "", "address": "",
    "socialLinks": {"linkedin": "", "github": "", "portfolio": ""}
  },
  "professionalSummary": "",
  "experience": [
    {"jobTitle": "", "company": "", "location": "", "startDate": "", "endDate": "",
     "current": false, "description": "", "achievements": [""]}
  ],
  "education": [
    {"degree": "", "institution": "", "location": "", "startDate": "", "endDate": "",
     "gpa": "", "description": ""}
  ],
  "skills": {"technical": [""], "soft": [""], "languages": [""], "tools": [""]},
  "projects": [
    {"title": "", "description": "", "technologies": [""], "link": "", "github": "",
     "startDate": "", "endDate": ""}
  ],
  "certifications": [
    {"name": "", "issuer": "", "date": "", "credentialId": "", "link": ""}
  ]
}

══════════════════════════════════════════════════════════════════════════════
RULES
══════════════════════════════════════════════════════════════════════════════

1. OUTPUT ONLY VALID JSON - No markdown, no explanations, no code blocks
2. USE "" OR [] FOR MISSING DATA - Never fabricate or assume
3. PRESERVE ORIGINAL TEXT - Fix only clear OCR/extraction errors
4. DATES - Keep the resume's wording ("Jan 2022", "2019"); use "Present" for ongoing roles
   and set "current": true
5. SKILLS - "technical": languages, frameworks, databases; "tools": platforms and software;
   "soft": interpersonal skills; "languages": spoken languages only
6. ACHIEVEMENTS - One bullet per entry, keep numbers and metrics
7. URLS - Reconstruct protocols (assume https://) for LinkedIn, GitHub and portfolio links

NOW PARSE THE FOLLOWING RESUME:
"""


# ============================================================================
# Response handling
# ============================================================================

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_object(response_text: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a free-text model response.

    Strips markdown fences, tries a direct parse, then falls back to the
    outermost ``{...}`` substring. Raises AIResponseParseError otherwise.
    """
    cleaned = _CODE_FENCE.sub("", (response_text or "").strip()).strip()

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _JSON_OBJECT.search(cleaned)
        if not match:
            raise AIResponseParseError("No JSON object found in AI response", response_text or "")
        try:
            parsed = json.loads(match.group())
        except json.JSONDecodeError as e:
            raise AIResponseParseError(f"Failed to parse AI response: {e}", response_text) from e

    if not isinstance(parsed, dict):
        raise AIResponseParseError("AI response JSON is not an object", response_text)
    return parsed


def _safe_get(obj, *keys, default=None):
    """Safely traverse nested dict/object."""
    for key in keys:
        if isinstance(obj, dict):
            obj = obj.get(key)
        else:
            return default
        if obj is None:
            return default
    return obj if obj is not None else default


def _first(obj: dict, *keys):
    """First present, non-empty value among alternative key spellings."""
    for key in keys:
        value = obj.get(key)
        if value not in (None, "", [], {}):
            return value
    return None


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


def _as_mapping(value) -> dict:
    return value if isinstance(value, dict) else {}


def _normalize_skills(raw) -> Dict[str, list]:
    """Accept the categorized dict, a flat list, or a list of {name, category} objects."""
    skills = {category: [] for category in SKILL_CATEGORIES}

    if isinstance(raw, dict):
        for category in SKILL_CATEGORIES:
            value = raw.get(category)
            skills[category] = value.split(",") if isinstance(value, str) else _as_list(value)
        # Models sometimes answer with finer-grained groups
        skills["technical"] += _as_list(raw.get("frameworks")) + _as_list(raw.get("programming"))
        skills["tools"] += _as_list(raw.get("platforms")) + _as_list(raw.get("software"))
    elif isinstance(raw, list):
        for item in raw:
            if isinstance(item, str):
                skills["technical"].append(item)
            elif isinstance(item, dict) and isinstance(item.get("name"), str):
                category = item.get("category")
                if category in ("soft", "soft_skill"):
                    skills["soft"].append(item["name"])
                elif category in ("tool", "tools", "cloud", "platform"):
                    skills["tools"].append(item["name"])
                elif category in ("languages", "spoken", "spoken_language"):
                    skills["languages"].append(item["name"])
                else:
                    skills["technical"].append(item["name"])

    return {
        category: [normalize_skill_name(name) if isinstance(name, str) else name for name in names]
        for category, names in skills.items()
    }


def normalize_gemini_output(data: dict) -> dict:
    """
    Map the model's key spellings onto the record's camelCase keys.

    The prompt asks for the exact shape, but models drift to snake_case or
    to synonyms (``name``, ``work_experience``, ``school``). The result still
    goes through sanitize_resume.
    """
    pi = _as_mapping(_first(data, "personalInfo", "personal_info", "contact", "basics") or {})
    links = _as_mapping(_first(pi, "socialLinks", "social_links", "links") or {})

    personal_info = {
        "fullName": _first(pi, "fullName", "full_name", "name"),
        "jobTitle": _first(pi, "jobTitle", "job_title", "title", "headline") or data.get("current_role"),
        "email": _first(pi, "email"),
        "phone": _first(pi, "phone", "mobile"),
        "address": _first(pi, "address", "location"),
        "photo": _first(pi, "photo"),
        "socialLinks": {
            "linkedin": _first(links, "linkedin") or _first(pi, "linkedin", "linkedin_url"),
            "github": _first(links, "github") or _first(pi, "github", "github_url"),
            "portfolio": _first(links, "portfolio", "website") or _first(pi, "portfolio", "portfolio_url", "website"),
        },
    }

    summary = _first(data, "professionalSummary", "professional_summary", "summary", "objective")
    if isinstance(summary, dict):
        summary = _safe_get(summary, "generated") or _safe_get(summary, "original") or ""

    experience = []
    for exp in _as_list(_first(data, "experience", "work_experience", "workExperience", "employment")):
        if not isinstance(exp, dict):
            continue
        achievements = _first(exp, "achievements", "highlights", "bullets", "responsibilities")
        end_date = _first(exp, "endDate", "end_date", "end")
        experience.append({
            "jobTitle": _first(exp, "jobTitle", "job_title", "title", "role", "position"),
            "company": _first(exp, "company", "employer", "organization"),
            "location": _first(exp, "location", "city"),
            "startDate": _first(exp, "startDate", "start_date", "start"),
            "endDate": end_date,
            "current": exp.get("current") is True or exp.get("is_current") is True
                or (isinstance(end_date, str) and end_date.strip().lower() in ("present", "current", "now")),
            "description": _first(exp, "description", "summary"),
            "achievements": achievements if isinstance(achievements, list) else [],
        })

    education = []
    for edu in _as_list(_first(data, "education")):
        if not isinstance(edu, dict):
            continue
        degree = _first(edu, "degree")
        field = _first(edu, "fieldOfStudy", "field_of_study", "major")
        if isinstance(degree, str) and isinstance(field, str) and field.lower() not in degree.lower():
            degree = f"{degree} in {field}"
        education.append({
            "degree": degree,
            "institution": _first(edu, "institution", "school", "university", "college"),
            "location": _first(edu, "location"),
            "startDate": _first(edu, "startDate", "start_date", "start_year"),
            "endDate": _first(edu, "endDate", "end_date", "end_year", "graduationYear", "year"),
            "gpa": _first(edu, "gpa", "grade", "cgpa"),
            "description": _first(edu, "description"),
        })

    projects = []
    for proj in _as_list(_first(data, "projects")):
        if isinstance(proj, str):
            proj = {"title": proj}
        if not isinstance(proj, dict):
            continue
        technologies = _first(proj, "technologies", "tech_stack", "techStack", "stack")
        projects.append({
            "title": _first(proj, "title", "name"),
            "description": _first(proj, "description", "summary"),
            "technologies": [normalize_skill_name(t) for t in technologies if isinstance(t, str)]
                if isinstance(technologies, list) else technologies,
            "link": _first(proj, "link", "url", "demo"),
            "github": _first(proj, "github", "repo", "repository"),
            "startDate": _first(proj, "startDate", "start_date"),
            "endDate": _first(proj, "endDate", "end_date"),
        })

    certifications = []
    for cert in _as_list(_first(data, "certifications", "certificates")):
        if isinstance(cert, str):
            cert = {"name": cert}
        if not isinstance(cert, dict):
            continue
        certifications.append({
            "name": _first(cert, "name", "title"),
            "issuer": _first(cert, "issuer", "organization", "authority"),
            "date": _first(cert, "date", "year", "issued"),
            "credentialId": _first(cert, "credentialId", "credential_id"),
            "link": _first(cert, "link", "url", "verification_url"),
        })

    return sanitize_resume({
        "personalInfo": personal_info,
        "professionalSummary": summary,
        "experience": experience,
        "education": education,
        "skills": _normalize_skills(_first(data, "skills")),
        "projects": projects,
        "certifications": certifications,
    })


# ============================================================================
# Core Functions
# ============================================================================

def build_resume_prompt(resume_text: str, max_chars: Optional[int] = None) -> str:
    max_chars = max_chars or get_settings().ai_max_prompt_chars
    if len(resume_text) > max_chars:
        logger.info(f"Resume text truncated from {len(resume_text)} to {max_chars} characters")
        resume_text = resume_text[:max_chars]
    return f"{RESUME_PARSER_PROMPT}\n{resume_text}"


async def parse_resume_with_gemini(
    resume_text: str,
    pdf_bytes: Optional[bytes] = None,
    client: Optional[GeminiClient] = None,
) -> dict:
    """
    Parse resume text with Gemini.

    Args:
        resume_text: Extracted document text
        pdf_bytes: Original PDF, used for page images when the text is empty
        client: Gemini client, defaults to the shared one

    Returns:
        Sanitized structured resume record (camelCase dict)

    Raises:
        AIServiceError: provider failure, no configuration or unusable response
    """
    client = client or get_gemini_client()
    if not client.is_available():
        raise AIServiceUnavailableError()

    resume_text = (resume_text or "").strip()
    settings = get_settings()

    if resume_text:
        contents = build_resume_prompt(resume_text)
        cache_key = make_cache_key("resume_parse", resume_text)
    elif pdf_bytes and settings.ai_vision_fallback:
        logger.info("No text layer found, sending PDF page images to Gemini")
        contents = [RESUME_PARSER_PROMPT]
        for img_bytes in pdf_to_images(pdf_bytes):
            contents.append(types.Part.from_bytes(data=img_bytes, mime_type="image/png"))
        cache_key = None
    else:
        raise AIResponseParseError("Nothing to parse: document has no text")

    response_text = await client.generate_text(
        contents,
        temperature=RESUME_PARSE_TEMPERATURE,
        max_output_tokens=RESUME_PARSE_MAX_TOKENS,
        cache_key=cache_key,
    )

    try:
        parsed_data = extract_json_object(response_text)
    except AIResponseParseError:
        logger.warning(f"Failed to parse JSON response. Raw response: {response_text[:500]}...")
        # Drop the cached answer so the next upload asks again
        if cache_key and client.cache is not None:
            client.cache.invalidate(cache_key)
        raise

    return normalize_gemini_output(parsed_data)
