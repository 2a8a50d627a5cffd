"""
Script to run a resume file through the parsing cascade and print the result
Run with: python parse_resume_file.py path/to/resume.pdf [--no-ai]
"""
import argparse
import asyncio
import json
import mimetypes
from dotenv import load_dotenv

load_dotenv()

from resume_builder.services.resume_cascade import ResumeExtractionCascade  # noqa: E402


async def skip_ai(text, pdf_bytes=None):
    raise RuntimeError("AI layer disabled with --no-ai")


async def parse_file(path: str, use_ai: bool):
    with open(path, "rb") as f:
        content = f.read()

    content_type = mimetypes.guess_type(path)[0] or ""
    cascade = ResumeExtractionCascade() if use_ai else ResumeExtractionCascade(ai_extractor=skip_ai)
    outcome = await cascade.parse_document(content, content_type, path)

    print(json.dumps(outcome.data, indent=2, ensure_ascii=False))
    print(f"\n📄 {path} ({len(content) / 1024:.1f}KB)")
    print(f"✅ Parsing method: {outcome.method.value}")
    for warning in outcome.warnings:
        print(f"⚠️  {warning}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Parse a resume file without starting the API")
    parser.add_argument("path")
    parser.add_argument("--no-ai", action="store_true", help="skip the Gemini layer")
    args = parser.parse_args()
    asyncio.run(parse_file(args.path, use_ai=not args.no_ai))
