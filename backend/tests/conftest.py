"""
Shared fixtures.

The environment is pinned before the application is imported: a throwaway
SQLite database and no Gemini keys, so nothing reaches the network.
"""
import asyncio
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="resume_builder_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["GEMINI_API_KEY"] = ""
os.environ["GEMINI_API_KEYS"] = ""
os.environ["AI_RETRY_DELAY"] = "0"

import pytest
from fastapi.testclient import TestClient

from resume_builder.database import Base, engine
from resume_builder.exceptions import AIServiceUnavailableError
from resume_builder.main import app
from resume_builder.services.gemini_client import reset_gemini_client
from resume_builder.services.resume_cascade import ResumeExtractionCascade, get_extraction_cascade


SAMPLE_RESUME = """JOHN SMITH
Senior Software Engineer
john.smith@email.com | (555) 123-4567 | San Francisco, CA
linkedin.com/in/johnsmith | github.com/johnsmith

PROFESSIONAL SUMMARY
Backend engineer with 8 years of experience building APIs.

EXPERIENCE
Senior Software Engineer
TechCorp Inc. | San Francisco, CA | Jan 2020 - Present
• Led migration to microservices
• Mentored 4 junior engineers

Software Engineer at StartupXYZ
Jun 2016 - Dec 2019
• Built payment integrations

EDUCATION
Bachelor of Science in Computer Science
Stanford University | 2012 - 2016
GPA: 3.8/4.0

SKILLS
Languages: Python, JavaScript, Go
Tools: Docker, Kubernetes, Git
Soft Skills: Leadership, Communication

PROJECTS
Resume Parser | Python, FastAPI
• Parses resumes with a cascade of strategies.
GitHub: github.com/johnsmith/resume-parser

CERTIFICATIONS
AWS Certified Solutions Architect - Amazon Web Services, 2021
"""


async def failing_ai_extractor(text, pdf_bytes=None):
    raise AIServiceUnavailableError()


async def _reset_database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def sample_resume_text():
    return SAMPLE_RESUME


@pytest.fixture
def offline_cascade():
    """Cascade whose AI layer always fails, as it does without an API key."""
    return ResumeExtractionCascade(ai_extractor=failing_ai_extractor)


@pytest.fixture
def client(offline_cascade):
    asyncio.run(_reset_database())
    reset_gemini_client()
    app.dependency_overrides[get_extraction_cascade] = lambda: offline_cascade
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    reset_gemini_client()
