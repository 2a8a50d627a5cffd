"""
Tests for the rule-based resume parser.
"""

import time

from resume_builder.services.heuristic_parser import (
    detect_heading,
    find_email,
    find_phone,
    find_social_links,
    find_urls,
    parse_education,
    parse_experience,
    parse_resume_heuristic,
    parse_skill_lines,
)
from resume_builder.services.resume_sanitizer import default_resume, is_plausible
from resume_builder.services.skill_vocabulary import find_known_skills, normalize_skill_name


class TestContactDetails:
    """Test email, phone and link extraction."""

    def test_find_email(self):
        assert find_email("Contact jane@x.com. Skills: JavaScript") == "jane@x.com"
        assert find_email("no email here") == ""

    def test_find_phone(self):
        assert find_phone("Call +1 (555) 010-9999 today") == "+1 (555) 010-9999"

    def test_find_phone_ignores_year_ranges(self):
        assert find_phone("2019 - 2021") == ""

    def test_find_phone_ignores_short_numbers(self):
        assert find_phone("Room 12345") == ""

    def test_social_links(self):
        text = "linkedin.com/in/jane | github.com/jane\nRepo: github.com/jane/project"
        header = "jane@x.com | janedoe.dev\nlinkedin.com/in/jane | github.com/jane"

        links = find_social_links(text, header)

        assert links["linkedin"] == "https://linkedin.com/in/jane"
        assert links["github"] == "https://github.com/jane"
        assert links["portfolio"] == "https://janedoe.dev"

    def test_email_domain_is_not_a_portfolio(self):
        links = find_social_links("jane@example.com", "jane@example.com")

        assert links["portfolio"] == ""

    def test_find_urls(self):
        assert find_urls("see janedoe.dev/blog or https://x.org") == ["janedoe.dev/blog", "https://x.org"]
        assert find_urls("Built with Node.js and Vue.js") == []
        assert find_urls("GPA 3.8/4.0, e.g. honours") == []

    def test_overlong_tokens_are_skipped(self):
        token = "a" * 300 + "@x.com"

        assert find_email(token) == ""
        assert find_email(f"{token} jane@x.com") == "jane@x.com"


class TestSections:
    """Test section heading detection."""

    def test_plain_heading(self):
        assert detect_heading("EXPERIENCE") == ("experience", "")
        assert detect_heading("Work Experience") == ("experience", "")
        assert detect_heading("Skills & Tools") == ("skills", "")

    def test_heading_with_inline_content(self):
        assert detect_heading("SKILLS: Python, SQL") == ("skills", "Python, SQL")

    def test_labels_are_not_headings(self):
        assert detect_heading("Technologies: React, Node.js") == (None, "")
        assert detect_heading("Languages: English, Hindi") == (None, "")

    def test_bullets_are_not_headings(self):
        assert detect_heading("• Experience") == (None, "")

    def test_long_lines_are_not_headings(self):
        assert detect_heading("Experience building distributed systems at scale for years") == (None, "")


class TestSkills:
    """Test skill vocabulary matching and labelled skill lines."""

    def test_normalize_skill_name(self):
        assert normalize_skill_name("reactjs") == "React"
        assert normalize_skill_name("  node   js ") == "Node.js"
        assert normalize_skill_name("python") == "Python"
        assert normalize_skill_name("Some Niche Tool") == "Some Niche Tool"

    def test_java_does_not_match_javascript(self):
        found = find_known_skills("Strong JavaScript background")

        assert "JavaScript" in found["technical"]
        assert "Java" not in found["technical"]

    def test_acronyms_are_case_sensitive(self):
        found = find_known_skills("we rest on weekends")

        assert "REST" not in found["technical"]

    def test_only_canonical_spelling_matches(self):
        """Test common English words in lowercase are not read as skills."""
        found = find_known_skills("please express your views on the swift river and good communication")

        assert found == {"technical": [], "tools": [], "soft": [], "languages": []}
        assert "Swift" in find_known_skills("iOS apps in Swift")["technical"]

    def test_labelled_lines(self):
        skills = parse_skill_lines([
            "Programming: Python, reactjs",
            "Tools: Docker, Some Niche Tool",
            "Soft Skills: Leadership",
            "• Spoken Languages: English (native), French",
        ])

        assert skills["technical"] == ["Python", "React"]
        assert skills["tools"] == ["Docker", "Some Niche Tool"]
        assert skills["soft"] == ["Leadership"]
        assert skills["languages"] == ["English", "French"]


class TestSectionParsers:
    """Test experience and education parsing."""

    def test_experience_title_at_company(self):
        entries = parse_experience([
            "Software Engineer at StartupXYZ",
            "Jun 2016 - Dec 2019",
            "• Built payment integrations",
        ])

        assert len(entries) == 1
        assert entries[0]["jobTitle"] == "Software Engineer"
        assert entries[0]["company"] == "StartupXYZ"
        assert entries[0]["startDate"] == "Jun 2016"
        assert entries[0]["endDate"] == "Dec 2019"
        assert entries[0]["current"] is False
        assert entries[0]["achievements"] == ["Built payment integrations"]

    def test_experience_current_role(self):
        entries = parse_experience(["Data Analyst, Globex | 03/2021 - Present"])

        assert entries[0]["jobTitle"] == "Data Analyst"
        assert entries[0]["company"] == "Globex"
        assert entries[0]["current"] is True

    def test_education_state_code_is_a_location(self):
        entries = parse_education([
            "Master of Science in Data Science",
            "Harvard University | Cambridge, MA | 2018 - 2020",
        ])

        assert len(entries) == 1
        assert entries[0]["degree"] == "Master of Science in Data Science"
        assert entries[0]["institution"] == "Harvard University"
        assert entries[0]["location"] == "Cambridge, MA"
        assert entries[0]["endDate"] == "2020"


class TestParseResumeHeuristic:
    """Test full-text heuristic extraction."""

    def test_email_and_skill_from_one_line(self):
        record = parse_resume_heuristic("Contact jane@x.com. Skills: JavaScript")

        assert record["personalInfo"]["email"] == "jane@x.com"
        assert "JavaScript" in record["skills"]["technical"]
        assert is_plausible(record)

    def test_garbage_yields_empty_record(self):
        assert parse_resume_heuristic("lorem ipsum dolor sit amet") == default_resume()

    def test_prose_without_contact_details_yields_empty_record(self):
        """Test capitalised vocabulary words in plain prose do not make a resume."""
        prose = "Leadership matters. Swift decisions and clear Communication win the day.\nExpress yourself."

        assert parse_resume_heuristic(prose) == default_resume()

    def test_empty_text(self):
        assert parse_resume_heuristic("") == default_resume()
        assert parse_resume_heuristic("   \n\n  ") == default_resume()

    def test_sample_resume_personal_info(self, sample_resume_text):
        personal = parse_resume_heuristic(sample_resume_text)["personalInfo"]

        assert personal["fullName"] == "John Smith"
        assert personal["jobTitle"] == "Senior Software Engineer"
        assert personal["email"] == "john.smith@email.com"
        assert personal["phone"] == "(555) 123-4567"
        assert personal["address"] == "San Francisco, CA"
        assert personal["socialLinks"]["linkedin"] == "https://linkedin.com/in/johnsmith"
        assert personal["socialLinks"]["github"] == "https://github.com/johnsmith"
        assert personal["socialLinks"]["portfolio"] == ""

    def test_sample_resume_sections(self, sample_resume_text):
        record = parse_resume_heuristic(sample_resume_text)

        assert record["professionalSummary"] == "Backend engineer with 8 years of experience building APIs."

        assert len(record["experience"]) == 2
        first, second = record["experience"]
        assert first["jobTitle"] == "Senior Software Engineer"
        assert first["company"] == "TechCorp Inc."
        assert first["location"] == "San Francisco, CA"
        assert first["startDate"] == "Jan 2020"
        assert first["current"] is True
        assert first["achievements"] == ["Led migration to microservices", "Mentored 4 junior engineers"]
        assert second["company"] == "StartupXYZ"

        assert record["education"] == [{
            "degree": "Bachelor of Science in Computer Science",
            "institution": "Stanford University",
            "location": "",
            "startDate": "2012",
            "endDate": "2016",
            "gpa": "3.8/4.0",
            "description": "",
        }]

    def test_sample_resume_skills(self, sample_resume_text):
        skills = parse_resume_heuristic(sample_resume_text)["skills"]

        assert skills["technical"] == ["Python", "JavaScript", "Golang", "FastAPI"]
        assert skills["tools"] == ["Docker", "Kubernetes", "Git", "GitHub", "AWS"]
        assert skills["soft"] == ["Leadership", "Communication"]
        assert skills["languages"] == []

    def test_sample_resume_projects_and_certifications(self, sample_resume_text):
        record = parse_resume_heuristic(sample_resume_text)

        project = record["projects"][0]
        assert project["title"] == "Resume Parser"
        assert project["technologies"] == ["Python", "FastAPI"]
        assert project["description"] == "Parses resumes with a cascade of strategies."
        assert project["github"] == "https://github.com/johnsmith/resume-parser"

        certification = record["certifications"][0]
        assert certification["name"] == "AWS Certified Solutions Architect"
        assert certification["issuer"] == "Amazon Web Services"
        assert certification["date"] == "2021"


class TestLongInput:
    """Test adversarial input stays fast."""

    def assert_fast(self, text, limit=5.0):
        started = time.monotonic()
        record = parse_resume_heuristic(text)
        assert time.monotonic() - started < limit
        return record

    def test_dotted_run(self):
        assert self.assert_fast("a." * 100_000) == default_resume()

    def test_single_long_word(self):
        assert self.assert_fast("a" * 200_000) == default_resume()

    def test_many_dotted_tokens(self):
        text = " ".join(["a." * 120] * 800)

        assert self.assert_fast(text) == default_resume()

    def test_long_lines_with_whitespace_runs(self):
        text = "Jan" + " \t" * 50_000 + "\nSKILLS\n" + "(" * 50_000 + "\n" + "1-" * 50_000

        record = self.assert_fast(text)
        assert record["personalInfo"]["fullName"] == ""
