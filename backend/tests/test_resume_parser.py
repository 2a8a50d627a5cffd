"""
Tests for the Gemini resume parser: JSON extraction and output normalization.
"""

import json

import pytest

from resume_builder.exceptions import AIResponseParseError, AIServiceUnavailableError
from resume_builder.services.resume_parser import (
    RESUME_PARSE_TEMPERATURE,
    build_resume_prompt,
    extract_json_object,
    normalize_gemini_output,
    parse_resume_with_gemini,
)
from resume_builder.services.response_cache import ResponseCache, make_cache_key


class StubGeminiClient:
    """Stands in for GeminiClient; returns a canned response."""

    def __init__(self, response, available=True):
        self.response = response
        self.available = available
        self.cache = ResponseCache()
        self.calls = []

    def is_available(self):
        return self.available

    async def generate_text(self, contents, **kwargs):
        self.calls.append((contents, kwargs))
        return self.response


GEMINI_RECORD = {
    "personalInfo": {
        "fullName": "Jane Doe",
        "email": "jane@x.com",
        "socialLinks": {"github": "https://github.com/jane"},
    },
    "professionalSummary": "Backend engineer.",
    "experience": [{"jobTitle": "Engineer", "company": "Acme", "endDate": "Present"}],
    "skills": {"technical": ["python", "reactjs"], "tools": ["Docker"]},
}


class TestExtractJsonObject:
    """Test pulling JSON out of free-text model responses."""

    def test_plain_json(self):
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_fenced_json(self):
        assert extract_json_object('```json\n{"a": 1}\n```') == {"a": 1}

    def test_json_inside_prose(self):
        response = 'Here is the data you asked for:\n{"a": {"b": [1, 2]}}\nLet me know!'

        assert extract_json_object(response) == {"a": {"b": [1, 2]}}

    def test_no_json(self):
        with pytest.raises(AIResponseParseError, match="No JSON object"):
            extract_json_object("I cannot help with that.")

    def test_broken_json(self):
        with pytest.raises(AIResponseParseError):
            extract_json_object('{"a": 1,, }')

    def test_array_is_rejected(self):
        with pytest.raises(AIResponseParseError, match="not an object"):
            extract_json_object("[1, 2, 3]")


class TestNormalizeGeminiOutput:
    """Test mapping model key spellings onto the record."""

    def test_camel_case_record(self):
        record = normalize_gemini_output(GEMINI_RECORD)

        assert record["personalInfo"]["fullName"] == "Jane Doe"
        assert record["personalInfo"]["socialLinks"]["github"] == "https://github.com/jane"
        assert record["experience"][0]["current"] is True
        assert record["skills"]["technical"] == ["Python", "React"]
        assert record["skills"]["tools"] == ["Docker"]

    def test_snake_case_and_synonyms(self):
        data = {
            "personal_info": {"name": "John Smith", "location": "Austin, TX", "linkedin_url": "linkedin.com/in/js"},
            "summary": {"original": "Builder of things."},
            "work_experience": [{"title": "Developer", "employer": "Initech", "is_current": True,
                                 "highlights": ["Shipped v2"]}],
            "education": [{"degree": "BSc", "field_of_study": "Physics", "school": "MIT", "graduationYear": 2015}],
            "skills": [{"name": "Go", "category": "language"}, {"name": "Jira", "category": "tool"}, "SQL"],
            "projects": ["Side project"],
            "certificates": ["CKA"],
        }

        record = normalize_gemini_output(data)

        assert record["personalInfo"]["fullName"] == "John Smith"
        assert record["personalInfo"]["address"] == "Austin, TX"
        assert record["personalInfo"]["socialLinks"]["linkedin"] == "linkedin.com/in/js"
        assert record["professionalSummary"] == "Builder of things."
        assert record["experience"][0]["company"] == "Initech"
        assert record["experience"][0]["current"] is True
        assert record["experience"][0]["achievements"] == ["Shipped v2"]
        assert record["education"][0]["degree"] == "BSc in Physics"
        assert record["education"][0]["institution"] == "MIT"
        assert record["education"][0]["endDate"] == "2015"
        assert record["skills"]["languages"] == []
        assert record["skills"]["tools"] == ["Jira"]
        assert record["skills"]["technical"] == ["Golang", "SQL"]
        assert record["projects"][0]["title"] == "Side project"
        assert record["certifications"][0]["name"] == "CKA"

    def test_comma_separated_skill_strings(self):
        record = normalize_gemini_output({"skills": {"technical": "Python, SQL", "frameworks": ["nextjs"]}})

        assert record["skills"]["technical"] == ["Python", "SQL", "Next.js"]

    def test_garbage_yields_empty_record(self):
        record = normalize_gemini_output({"unexpected": True})

        assert record["personalInfo"]["fullName"] == ""
        assert record["experience"] == []


class TestBuildResumePrompt:
    """Test prompt construction."""

    def test_includes_text(self):
        prompt = build_resume_prompt("Jane Doe\njane@x.com")

        assert prompt.endswith("Jane Doe\njane@x.com")
        assert "personalInfo" in prompt

    def test_truncates_long_text(self):
        prompt = build_resume_prompt("abcdefghijklmnop", max_chars=5)

        assert prompt.endswith("\nabcde")


class TestParseResumeWithGemini:
    """Test the AI parsing entry point against a stub client."""

    @pytest.mark.asyncio
    async def test_parses_fenced_response(self):
        client = StubGeminiClient(f"```json\n{json.dumps(GEMINI_RECORD)}\n```")

        record = await parse_resume_with_gemini("Jane Doe, jane@x.com", client=client)

        assert record["personalInfo"]["email"] == "jane@x.com"
        contents, kwargs = client.calls[0]
        assert "Jane Doe, jane@x.com" in contents
        assert kwargs["temperature"] == RESUME_PARSE_TEMPERATURE
        assert kwargs["cache_key"] == make_cache_key("resume_parse", "Jane Doe, jane@x.com")

    @pytest.mark.asyncio
    async def test_unconfigured_client(self):
        client = StubGeminiClient("{}", available=False)

        with pytest.raises(AIServiceUnavailableError):
            await parse_resume_with_gemini("Jane Doe", client=client)
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_nothing_to_parse(self):
        client = StubGeminiClient("{}")

        with pytest.raises(AIResponseParseError, match="Nothing to parse"):
            await parse_resume_with_gemini("   ", client=client)

    @pytest.mark.asyncio
    async def test_malformed_response_drops_cached_answer(self):
        client = StubGeminiClient("Sorry, I can't read this resume.")
        cache_key = make_cache_key("resume_parse", "Jane Doe")
        client.cache.set(cache_key, "Sorry, I can't read this resume.")

        with pytest.raises(AIResponseParseError):
            await parse_resume_with_gemini("Jane Doe", client=client)
        assert client.cache.get(cache_key) is None
