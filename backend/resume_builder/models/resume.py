"""
Resume document model - one JSON document per saved resume.
"""
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, JSON, Enum as SQLEnum
from ..database import Base


class ResumeStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class ResumeTemplate(str, enum.Enum):
    CLASSIC = "classic"
    MODERN = "modern"
    MINIMAL = "minimal"
    DESIGNER = "designer"
    PROFESSIONAL = "professional"
    CREATIVE = "creative"


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, default="Untitled Resume")
    status = Column(SQLEnum(ResumeStatus), default=ResumeStatus.DRAFT, nullable=False, index=True)
    template = Column(SQLEnum(ResumeTemplate), default=ResumeTemplate.MODERN, nullable=False)

    # Structured resume record, always stored sanitized
    content = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=lambda: datetime.now(timezone.utc))
