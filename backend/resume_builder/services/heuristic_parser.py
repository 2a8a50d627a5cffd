"""
Rule-based resume parser.

Recovers contact details, skills and section content with regexes and
keyword lists when the AI parser is unavailable. Best effort: anything it
cannot place is left empty.
"""
import logging
import re
from typing import Dict, List, Optional, Tuple

from .resume_sanitizer import default_resume, sanitize_resume
from .skill_vocabulary import VOCABULARIES, find_known_skills, normalize_skill_name

logger = logging.getLogger(__name__)

EMAIL = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_CANDIDATE = re.compile(r"\+?\(?\d[\d \t().-]{5,}\d")
LINKEDIN = re.compile(r"(?:https?://)?(?:[a-z]{2,3}\.)?linkedin\.com/[^\s|,;)]+", re.I)
GITHUB = re.compile(r"(?:https?://)?(?:www\.)?github\.com/[^\s|,;)]+", re.I)
URL = re.compile(r"(?:https?://|www\.)[^\s|,;)]+|\b[a-z0-9-]+(?:\.[a-z0-9-]+)+(?:/[^\s|,;)]*)?", re.I)
WEB_TLDS = {"com", "io", "dev", "me", "net", "org", "app", "co", "in"}
LOCATION = re.compile(r"^[A-Z][A-Za-z .'-]+,\s*[A-Z][A-Za-z .'-]+$")

# Emails and links are matched per whitespace token; longer tokens are skipped
MAX_CONTACT_TOKEN = 256

BULLET = re.compile(r"^[•●▪◦‣∙·*\-–]\s*")
SEGMENT_SPLIT = re.compile(r"\s*[|•·]\s*")

MONTH = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?|"
    r"Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.?"
)
DATE = rf"(?:{MONTH}\s*,?\s*\d{{4}}|\d{{1,2}}/\d{{4}}|\d{{4}})"
END_DATE = rf"(?:{DATE}|Present|Current|Now|Ongoing|Till Date|To Date)"
DATE_RANGE = re.compile(
    rf"(?<![\d/])(?P<start>{DATE})\s*(?:-|–|—|to|until)\s*(?P<end>{END_DATE})\b", re.I
)
YEAR = re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d)")
YEAR_RANGE_ONLY = re.compile(r"^\(?(?:19|20)\d{2}\s*[-–]\s*(?:19|20)\d{2}\)?$")
PRESENT = re.compile(r"^(present|current|now|ongoing|till date|to date)$", re.I)

DEGREE_WORDS = re.compile(
    r"\b(?:bachelor|master|doctor(?:ate)?|ph\.?\s?d|associate (?:degree|of)|diploma|"
    r"high school|secondary school|higher secondary)",
    re.I,
)
DEGREE_ABBR = re.compile(
    r"\b(?:B\.?\s?(?:Sc|S|A|Tech|E|Com|CA|BA)|M\.?\s?(?:Sc|S|A|Tech|E|Com|CA|BA)|MBA|PhD|HSC|SSC)\b"
)
INSTITUTION = re.compile(r"\b(?:university|college|institute|school|academy|polytechnic|iit|nit)\b", re.I)
GPA = re.compile(r"\b(?:c?gpa|grade|percentage)\s*[:\-]?\s*(\d+(?:\.\d+)?(?:\s*/\s*\d+(?:\.\d+)?)?%?)", re.I)

PROJECT_TECH = re.compile(r"^(?:technologies|tech stack|tech|tools|stack|built with)\s*[:\-]\s*(.+)$", re.I)
PROJECT_REPO = re.compile(r"^(?:github|repo|repository|source)\s*[:\-]\s*(\S+)", re.I)
PROJECT_LINK = re.compile(r"^(?:live|demo|link|url|website)\s*[:\-]\s*(\S+)", re.I)

TITLE_WORDS = re.compile(
    r"\b(?:developer|engineer|manager|designer|analyst|scientist|consultant|architect|intern|"
    r"specialist|lead|administrator|director|officer|coordinator|student|teacher|writer|"
    r"marketer|accountant|programmer|associate|executive|head|founder|researcher|assistant)\b",
    re.I,
)

SECTION_HEADINGS = {
    "summary": [
        "summary", "professional summary", "profile", "professional profile", "objective",
        "career objective", "about me", "about", "career summary",
    ],
    "experience": [
        "experience", "work experience", "professional experience", "employment",
        "employment history", "work history", "internships", "internship experience",
        "relevant experience",
    ],
    "education": [
        "education", "academic background", "academics", "education and training",
        "academic qualifications", "qualifications",
    ],
    "skills": [
        "skills", "technical skills", "core competencies", "key skills", "skills and tools",
        "technologies", "competencies", "core skills", "skills and expertise", "tech stack",
    ],
    "projects": ["projects", "personal projects", "academic projects", "key projects", "selected projects"],
    "certifications": [
        "certifications", "certificates", "licenses and certifications", "certifications and licenses",
        "courses and certifications", "certification",
    ],
    "languages": ["languages", "spoken languages", "language proficiency"],
    "other": [
        "awards", "achievements", "honors", "honors and awards", "publications", "volunteering",
        "volunteer experience", "interests", "hobbies", "references", "activities",
        "extracurricular activities", "additional information",
    ],
}

_HEADING_LOOKUP = {
    heading: section for section, headings in SECTION_HEADINGS.items() for heading in headings
}

# Headings that double as labels inside other sections
_LABEL_ONLY = {"technologies", "tech stack", "languages"}


# ============================================================================
# Line helpers
# ============================================================================

def _normalize_heading(line: str) -> str:
    text = line.lower().replace("&", "and")
    text = re.sub(r"[^a-z ]", " ", text)
    return " ".join(text.split())


def detect_heading(line: str) -> Tuple[Optional[str], str]:
    """
    Return (section, inline_content) when the line is a section heading.

    "SKILLS: Python, SQL" is a heading with inline content. Bulleted lines
    and labels that also occur inside sections ("Technologies: ...") never are.
    """
    if BULLET.match(line):
        return None, ""
    head, sep, rest = line.partition(":")
    if sep:
        heading = _normalize_heading(head)
        section = _HEADING_LOOKUP.get(heading)
        if section and heading not in _LABEL_ONLY:
            return section, rest.strip()
        if rest.strip():
            return None, ""
    if len(line) <= 40:
        section = _HEADING_LOOKUP.get(_normalize_heading(line))
        if section:
            return section, ""
    return None, ""


def split_sections(lines: List[str]) -> Tuple[List[str], Dict[str, List[str]]]:
    """Split lines into the header block and named sections (repeated sections are concatenated)."""
    header: List[str] = []
    sections: Dict[str, List[str]] = {}
    current = None
    for line in lines:
        section, inline = detect_heading(line)
        if section:
            current = section
            sections.setdefault(section, [])
            if inline:
                sections[section].append(inline)
        elif current is None:
            header.append(line)
        else:
            sections[current].append(line)
    return header, sections


def _is_bullet(line: str) -> bool:
    return bool(BULLET.match(line)) and not DATE_RANGE.match(line)


def _strip_bullet(line: str) -> str:
    return BULLET.sub("", line).strip()


def _segments(text: str) -> List[str]:
    return [s.strip(" ,-–—") for s in SEGMENT_SPLIT.split(text) if s.strip(" ,-–—")]


def _with_scheme(url: str) -> str:
    url = url.strip().rstrip(".")
    if not url:
        return ""
    return url if url.lower().startswith("http") else f"https://{url}"


def _split_dates(text: str) -> Tuple[str, str, str]:
    """Remove a date range (or trailing years) from text. Returns (rest, start, end)."""
    match = DATE_RANGE.search(text)
    if match:
        rest = (text[:match.start()] + " " + text[match.end():]).strip()
        return rest, match.group("start").strip(), match.group("end").strip()

    years = YEAR.findall(text)
    if years:
        rest = YEAR.sub(" ", text).strip()
        start = years[0] if len(years) > 1 else ""
        return rest, start, years[-1]
    return text, "", ""


def _clean_rest(text: str) -> str:
    text = re.sub(r"\(\s*\)", "", text)
    return " ".join(text.split()).strip(" |,-–—()")


# ============================================================================
# Contact details
# ============================================================================

def _contact_tokens(text: str) -> List[str]:
    return [token for token in text.split() if len(token) <= MAX_CONTACT_TOKEN]


def _is_web_url(url: str) -> bool:
    if url.lower().startswith(("http://", "https://", "www.")):
        return True
    host = url.split("/", 1)[0]
    return host.rsplit(".", 1)[-1].lower() in WEB_TLDS


def find_urls(text: str) -> List[str]:
    """Links in the text, scheme-less bare domains included when their TLD is a common web one."""
    urls = []
    for token in _contact_tokens(text):
        urls += [m.group() for m in URL.finditer(token) if _is_web_url(m.group())]
    return urls


def find_email(text: str) -> str:
    for token in _contact_tokens(text):
        if "@" not in token:
            continue
        match = EMAIL.search(token)
        if match:
            return match.group()
    return ""


def find_phone(text: str) -> str:
    for match in PHONE_CANDIDATE.finditer(text):
        candidate = match.group().strip()
        digits = re.sub(r"\D", "", candidate)
        if 7 <= len(digits) <= 15 and not YEAR_RANGE_ONLY.match(candidate):
            return candidate
    return ""


def find_social_links(text: str, header_text: str) -> Dict[str, str]:
    tokens = _contact_tokens(text)
    linkedin = next((m.group() for token in tokens for m in LINKEDIN.finditer(token)), "")

    github = ""
    github_urls = [m.group() for token in tokens for m in GITHUB.finditer(token)]
    # A profile URL has a single path segment; repository URLs have two
    for url in github_urls:
        if len(url.split("github.com/", 1)[-1].strip("/").split("/")) == 1:
            github = url
            break
    if not github and github_urls:
        github = github_urls[0]

    portfolio = ""
    # Email domains would otherwise read as bare-domain URLs
    for token in _contact_tokens(header_text):
        urls = find_urls(EMAIL.sub(" ", token))
        portfolio = next((u for u in urls if "linkedin.com" not in u.lower() and "github.com" not in u.lower()), "")
        if portfolio:
            break

    return {
        "linkedin": _with_scheme(linkedin),
        "github": _with_scheme(github),
        "portfolio": _with_scheme(portfolio),
    }


def _is_contact_line(line: str) -> bool:
    return bool(find_email(line) or find_urls(line) or find_phone(line))


def find_name_and_title(header: List[str]) -> Tuple[str, str]:
    """Name is the first plain 2-4 word line of the header, the title a nearby role-like line."""
    name, title = "", ""
    for index, line in enumerate(header[:6]):
        segments = _segments(line)
        if not segments:
            continue
        first = segments[0]
        if name:
            if not title and not _is_contact_line(line) and TITLE_WORDS.search(first) and len(first.split()) <= 8:
                title = first
            continue

        words = first.split()
        if (
            2 <= len(words) <= 4
            and len(first) <= 50
            and not re.search(r"[\d@/:,]", first)
            and all(re.match(r"[A-Za-z]", w) for w in words)
            and not re.search(r"\b(?:resume|curriculum|vitae|cv)\b", first, re.I)
            and not TITLE_WORDS.search(first)
        ):
            name = first.title() if first.isupper() else first
            for segment in segments[1:]:
                if TITLE_WORDS.search(segment) and not _is_contact_line(segment):
                    title = segment
                    break
    return name, title


def find_address(header: List[str], name: str) -> str:
    for line in header[:8]:
        for segment in _segments(line):
            if segment == name or _is_contact_line(segment) or len(segment) > 40:
                continue
            if LOCATION.match(segment):
                return segment
    return ""


# ============================================================================
# Sections
# ============================================================================

def _skill_category(label: str) -> str:
    label = label.lower()
    if "soft" in label or "interpersonal" in label:
        return "soft"
    if "language" in label and "programming" not in label:
        return "languages"
    if re.search(r"tool|platform|devops|cloud|software|ide", label):
        return "tools"
    return "technical"


_VOCAB_CATEGORY = {
    name.lower(): category for category, names in VOCABULARIES.items() for name in names
}


def parse_skill_lines(lines: List[str], default_label: str = "") -> Dict[str, List[str]]:
    """Labelled skill lists ("Tools: Git, Docker"); known skills keep their vocabulary category."""
    skills = {category: [] for category in VOCABULARIES}
    for raw in lines:
        line = _strip_bullet(raw)
        label, sep, values = line.partition(":")
        if not sep:
            label, values = default_label, line
        fallback = _skill_category(label)

        for value in re.split(r"[,;•|]", values):
            if len(value) > 200:
                continue
            value = re.sub(r"\s*\(.*?\)", "", value).strip(" .")
            if not value or len(value) > 40 or len(value.split()) > 4:
                continue
            skill = normalize_skill_name(value)
            skills[_VOCAB_CATEGORY.get(skill.lower(), fallback)].append(skill)
    return skills


def parse_experience(lines: List[str]) -> List[dict]:
    entries: List[dict] = []
    pending: List[str] = []

    for raw in lines:
        if _is_bullet(raw):
            if entries:
                entries[-1]["achievements"].append(_strip_bullet(raw))
            continue

        line = raw.strip()
        if DATE_RANGE.search(line):
            rest, start, end = _split_dates(line)
            candidates = pending[-2:] + _segments(_clean_rest(rest))
            title, company, location = _assign_role_fields(candidates)
            entries.append({
                "jobTitle": title,
                "company": company,
                "location": location,
                "startDate": start,
                "endDate": end,
                "current": bool(PRESENT.match(end)),
                "description": "",
                "achievements": [],
            })
            pending = []
        elif entries and (len(line) > 60 or len(line.split()) > 8):
            # Unbulleted description of the previous role
            entries[-1]["achievements"].append(line)
        else:
            pending.append(line)

    if not entries and pending:
        title, company, location = _assign_role_fields(pending[:3])
        entries.append({"jobTitle": title, "company": company, "location": location, "achievements": []})
    return entries


def _assign_role_fields(candidates: List[str]) -> Tuple[str, str, str]:
    """Pick title, company and location from header fragments of one role."""
    candidates = [c for c in candidates if c]
    if not candidates:
        return "", "", ""

    title_index = next((i for i, c in enumerate(candidates) if TITLE_WORDS.search(c)), 0)
    title = candidates[title_index]
    others = candidates[:title_index] + candidates[title_index + 1:]

    at_match = re.match(r"^(.*?)\s+(?:at|@)\s+(.+)$", title)
    if at_match:
        title = at_match.group(1)
        others.insert(0, at_match.group(2))
    elif not others and "," in title:
        title, _, company = title.partition(",")
        others.append(company.strip())

    company = others[0] if others else ""
    location = others[1] if len(others) > 1 else ""
    return title.strip(), company.strip(), location.strip()


def parse_education(lines: List[str]) -> List[dict]:
    entries: List[dict] = []
    current: Optional[dict] = None

    def new_entry() -> dict:
        entry = {"degree": "", "institution": "", "location": "", "startDate": "", "endDate": "", "gpa": "", "description": ""}
        entries.append(entry)
        return entry

    for raw in lines:
        line = _strip_bullet(raw)

        gpa = GPA.search(line)
        if gpa:
            current = current or new_entry()
            current["gpa"] = gpa.group(1).strip()
            line = _clean_rest(line[:gpa.start()] + " " + line[gpa.end():])

        rest, start, end = _split_dates(line)
        text = _clean_rest(rest)
        segments = _segments(text)
        if len(segments) == 1 and DEGREE_WORDS.search(text) and INSTITUTION.search(text):
            segments = [s.strip() for s in text.split(",") if s.strip()]

        # "Cambridge, MA" is a place, not a Master of Arts
        degree_seg = next(
            (s for s in segments if DEGREE_WORDS.search(s) or (DEGREE_ABBR.search(s) and not LOCATION.match(s))),
            None,
        )
        inst_seg = next((s for s in segments if INSTITUTION.search(s) and s != degree_seg), None)

        if degree_seg:
            if current is None or current["degree"]:
                current = new_entry()
            current["degree"] = degree_seg
        if inst_seg:
            if current is None or (current["institution"] and not degree_seg):
                current = new_entry()
            current["institution"] = inst_seg

        leftovers = [s for s in segments if s not in (degree_seg, inst_seg)]
        if current is not None:
            for segment in leftovers:
                if not current["location"] and LOCATION.match(segment):
                    current["location"] = segment
                elif not degree_seg and not inst_seg:
                    current["description"] = f"{current['description']} {segment}".strip()
        elif leftovers and (start or end):
            current = new_entry()
            current["institution"] = leftovers[0]

        if (start or end) and current is not None and not current["endDate"]:
            current["startDate"], current["endDate"] = start, end
    return entries


def parse_projects(lines: List[str]) -> List[dict]:
    projects: List[dict] = []
    current: Optional[dict] = None

    for raw in lines:
        bullet = _is_bullet(raw)
        line = _strip_bullet(raw)

        tech = PROJECT_TECH.match(line)
        repo = PROJECT_REPO.match(line)
        link = PROJECT_LINK.match(line)
        if current is not None and tech:
            current["technologies"] += [normalize_skill_name(t.strip()) for t in re.split(r"[,;|]", tech.group(1)) if t.strip()]
            continue
        if current is not None and repo:
            current["github"] = _with_scheme(repo.group(1))
            continue
        if current is not None and link:
            current["link"] = _with_scheme(link.group(1))
            continue

        github = GITHUB.search(line)
        if current is not None and github and len(line) - len(github.group()) < 15:
            current["github"] = _with_scheme(github.group())
            continue

        if not bullet and len(line.split()) <= 10 and not line.endswith("."):
            rest, start, end = _split_dates(line)
            segments = _segments(_clean_rest(rest))
            if not segments:
                continue
            current = {"title": segments[0], "description": "", "technologies": [], "link": "", "github": "",
                       "startDate": start, "endDate": end}
            for segment in segments[1:]:
                if "," in segment:
                    current["technologies"] += [normalize_skill_name(t.strip()) for t in segment.split(",") if t.strip()]
            projects.append(current)
        elif current is not None:
            current["description"] = f"{current['description']} {line}".strip()
    return projects


def parse_certifications(lines: List[str]) -> List[dict]:
    certifications = []
    for raw in lines:
        line = _strip_bullet(raw)
        if not line or len(line) > 150:
            continue
        rest, start, end = _split_dates(line)
        parts = [p.strip() for p in re.split(r"\s+[-–—|]\s+|\s+by\s+|,\s*", _clean_rest(rest)) if p.strip()]
        if not parts:
            continue
        urls = find_urls(line)
        certifications.append({
            "name": parts[0],
            "issuer": parts[1] if len(parts) > 1 and not find_urls(parts[1]) else "",
            "date": end or start,
            "link": _with_scheme(urls[0]) if urls else "",
        })
    return certifications


# ============================================================================
# Entry point
# ============================================================================

def parse_resume_heuristic(text: str) -> dict:
    """
    Extract a structured resume record from plain text without AI.

    Nothing is extracted unless the text has an anchor (a contact detail or
    a recognised section heading), so ordinary prose does not come back with
    a fabricated name or skills picked out of its words.
    """
    record = default_resume()
    # Runs of spaces and tabs collapse to one so the line regexes see bounded whitespace
    lines = [" ".join(line.split()) for line in (text or "").splitlines() if line.strip()]
    if not lines:
        return record
    text = "\n".join(lines)

    header, sections = split_sections(lines)
    if not sections:
        header = lines[:10]
    header_text = "\n".join(header)

    personal = record["personalInfo"]
    personal["email"] = find_email(header_text) or find_email(text)
    personal["phone"] = find_phone(header_text) or (find_phone(text) if not sections else "")
    personal["socialLinks"] = find_social_links(text, header_text)

    anchored = bool(personal["email"] or personal["phone"] or sections or any(personal["socialLinks"].values()))
    if not anchored:
        logger.info("Heuristic extraction: no contact details or section headings found")
        return default_resume()

    personal["fullName"], personal["jobTitle"] = find_name_and_title(header)
    personal["address"] = find_address(header, personal["fullName"])

    summary = sections.get("summary", [])
    record["professionalSummary"] = " ".join(summary)[:1500]

    section_skills = parse_skill_lines(sections.get("skills", []))
    language_skills = parse_skill_lines(sections.get("languages", []), default_label="languages")
    known_skills = find_known_skills(text)
    for category in record["skills"]:
        record["skills"][category] = section_skills[category] + language_skills[category] + known_skills[category]

    record["experience"] = parse_experience(sections.get("experience", []))
    record["education"] = parse_education(sections.get("education", []))
    record["projects"] = parse_projects(sections.get("projects", []))
    record["certifications"] = parse_certifications(sections.get("certifications", []))

    logger.info(
        f"Heuristic extraction: sections={sorted(sections)}, "
        f"experience={len(record['experience'])}, education={len(record['education'])}, "
        f"skills={sum(len(v) for v in record['skills'].values())}"
    )
    return sanitize_resume(record)
