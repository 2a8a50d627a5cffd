"""
Resumes Router - Resume upload, parsing, and resume document CRUD
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ..database import get_db
from ..models import Resume, ResumeStatus
from ..schemas.resume import (
    ApplyParsedRequest, Envelope, ParseMeta, ParseResponse, ParseTextRequest,
    ResumeCreate, ResumeListResponse, ResumeResponse, ResumeUpdate,
)
from ..services.resume_cascade import ParseOutcome, ResumeExtractionCascade, get_extraction_cascade
from ..services.resume_sanitizer import merge_resume_records, sanitize_resume
from ..services.text_extractor import validate_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resumes", tags=["Resumes"])


# ============================================================================
# Helper Functions
# ============================================================================

async def get_resume_or_404(db: AsyncSession, resume_id: int) -> Resume:
    result = await db.execute(select(Resume).where(Resume.id == resume_id))
    resume = result.scalar_one_or_none()
    if not resume:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Resume not found"
        )
    return resume


def build_parse_response(
    outcome: ParseOutcome,
    file_name: Optional[str] = None,
    file_size: Optional[int] = None,
) -> ParseResponse:
    return ParseResponse(
        success=True,
        message=outcome.message,
        data=outcome.data,
        meta=ParseMeta(
            parsing_method=outcome.method,
            file_name=file_name,
            file_size=file_size,
            uploaded_at=datetime.now(timezone.utc),
            warnings=outcome.warnings,
        ),
    )


# ============================================================================
# Upload & Parsing
# ============================================================================

@router.post("/upload", response_model=ParseResponse)
async def upload_resume(
    resume: UploadFile = File(...),
    cascade: ResumeExtractionCascade = Depends(get_extraction_cascade),
):
    """
    Upload a resume file and extract a structured record from it.

    Only type and size problems are HTTP errors (400). Once the file is
    accepted the response is always a success: the record comes from the AI
    layer, the heuristic layer, or is the empty structure for manual entry,
    as reported in meta.parsingMethod. Nothing is saved here; the client
    reviews the record and saves it explicitly.
    """
    content = await resume.read()
    content_type = validate_upload(content, resume.content_type, resume.filename or "")

    logger.info(f"Processing resume upload: {resume.filename} ({len(content)} bytes)")
    outcome = await cascade.parse_document(content, content_type, resume.filename or "")
    logger.info(f"Resume {resume.filename} parsed with method={outcome.method.value}")

    return build_parse_response(outcome, file_name=resume.filename, file_size=len(content))


@router.post("/parse-text", response_model=ParseResponse)
async def parse_resume_text(
    request: ParseTextRequest,
    cascade: ResumeExtractionCascade = Depends(get_extraction_cascade),
):
    """Run pasted resume text through the same parsing layers as an upload."""
    outcome = await cascade.parse_text(request.text)
    return build_parse_response(outcome)


# ============================================================================
# Resume Documents
# ============================================================================

@router.post("", response_model=Envelope[ResumeResponse], status_code=status.HTTP_201_CREATED)
async def create_resume(
    resume_data: ResumeCreate,
    db: AsyncSession = Depends(get_db),
):
    resume = Resume(
        title=resume_data.title,
        template=resume_data.template,
        status=ResumeStatus.DRAFT,
        content=sanitize_resume(resume_data.content),
    )
    db.add(resume)
    await db.commit()
    await db.refresh(resume)

    logger.info(f"Created resume {resume.id}")
    return Envelope[ResumeResponse](message="Resume created successfully", data=ResumeResponse.model_validate(resume))


@router.get("", response_model=ResumeListResponse)
async def list_resumes(
    status_filter: Optional[ResumeStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """List resumes, newest first. Optionally filter by status (?status=draft)."""
    query = select(Resume).order_by(Resume.created_at.desc(), Resume.id.desc())
    if status_filter:
        query = query.where(Resume.status == status_filter)

    result = await db.execute(query)
    resumes = result.scalars().all()
    return ResumeListResponse(
        count=len(resumes),
        data=[ResumeResponse.model_validate(r) for r in resumes],
    )


@router.get("/{resume_id}", response_model=Envelope[ResumeResponse])
async def get_resume(
    resume_id: int,
    db: AsyncSession = Depends(get_db),
):
    resume = await get_resume_or_404(db, resume_id)
    return Envelope[ResumeResponse](data=ResumeResponse.model_validate(resume))


@router.put("/{resume_id}", response_model=Envelope[ResumeResponse])
async def update_resume(
    resume_id: int,
    resume_data: ResumeUpdate,
    db: AsyncSession = Depends(get_db),
):
    resume = await get_resume_or_404(db, resume_id)

    update_data = resume_data.model_dump(exclude_unset=True)
    if resume_data.content is not None:
        update_data["content"] = sanitize_resume(resume_data.content)

    for field, value in update_data.items():
        if value is not None:
            setattr(resume, field, value)

    await db.commit()
    await db.refresh(resume)
    return Envelope[ResumeResponse](message="Resume updated successfully", data=ResumeResponse.model_validate(resume))


@router.delete("/{resume_id}")
async def delete_resume(
    resume_id: int,
    db: AsyncSession = Depends(get_db),
):
    resume = await get_resume_or_404(db, resume_id)
    await db.delete(resume)
    await db.commit()

    logger.info(f"Deleted resume {resume_id}")
    return {"success": True, "message": "Resume deleted successfully"}


@router.post("/{resume_id}/apply-parsed", response_model=Envelope[ResumeResponse])
async def apply_parsed_resume(
    resume_id: int,
    request: ApplyParsedRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Merge a parsed record into a saved resume.

    Non-empty parsed values overwrite the saved ones, skills are unioned.
    """
    resume = await get_resume_or_404(db, resume_id)
    resume.content = merge_resume_records(resume.content, request.data)

    await db.commit()
    await db.refresh(resume)
    return Envelope[ResumeResponse](message="Parsed data applied successfully", data=ResumeResponse.model_validate(resume))
