"""
Resume schemas: the structured resume record and the API envelopes around it.

Attribute names are snake_case; the wire format is camelCase (what the SPA
consumes), produced through the alias generator.
"""
from datetime import datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from ..models.resume import ResumeStatus, ResumeTemplate


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ============================================================================
# Structured Resume Record
# ============================================================================

class SocialLinks(CamelModel):
    linkedin: str = ""
    github: str = ""
    portfolio: str = ""


class PersonalInfo(CamelModel):
    full_name: str = ""
    job_title: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    photo: str = ""
    social_links: SocialLinks = Field(default_factory=SocialLinks)


class ExperienceEntry(CamelModel):
    job_title: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    description: str = ""
    achievements: List[str] = Field(default_factory=list)


class EducationEntry(CamelModel):
    degree: str = ""
    institution: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    gpa: str = ""
    description: str = ""


class SkillSet(CamelModel):
    technical: List[str] = Field(default_factory=list)
    soft: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)


class ProjectEntry(CamelModel):
    title: str = ""
    description: str = ""
    technologies: List[str] = Field(default_factory=list)
    link: str = ""
    github: str = ""
    start_date: str = ""
    end_date: str = ""


class CertificationEntry(CamelModel):
    name: str = ""
    issuer: str = ""
    date: str = ""
    credential_id: str = ""
    link: str = ""


class StructuredResume(CamelModel):
    """Complete structured resume record"""
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    professional_summary: str = ""
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    skills: SkillSet = Field(default_factory=SkillSet)
    projects: List[ProjectEntry] = Field(default_factory=list)
    certifications: List[CertificationEntry] = Field(default_factory=list)


# ============================================================================
# Parsing
# ============================================================================

class ParsingMethod(str, Enum):
    AI = "ai"
    HEURISTIC = "heuristic"
    MANUAL = "manual"


class ParseMeta(CamelModel):
    parsing_method: ParsingMethod
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    uploaded_at: datetime
    warnings: List[str] = Field(default_factory=list)


class ParseResponse(CamelModel):
    success: bool = True
    message: str
    data: StructuredResume
    meta: ParseMeta


class ParseTextRequest(CamelModel):
    text: str = Field(..., max_length=200_000)


# ============================================================================
# Resume documents
# ============================================================================

class ResumeCreate(CamelModel):
    title: str = Field("Untitled Resume", max_length=255)
    template: ResumeTemplate = ResumeTemplate.MODERN
    content: StructuredResume = Field(default_factory=StructuredResume)


class ResumeUpdate(CamelModel):
    title: Optional[str] = Field(None, max_length=255)
    status: Optional[ResumeStatus] = None
    template: Optional[ResumeTemplate] = None
    content: Optional[StructuredResume] = None


class ApplyParsedRequest(CamelModel):
    data: StructuredResume


class ResumeResponse(CamelModel):
    id: int
    title: str
    status: ResumeStatus
    template: ResumeTemplate
    content: StructuredResume
    created_at: datetime
    updated_at: Optional[datetime] = None


DataT = TypeVar("DataT")


class Envelope(CamelModel, Generic[DataT]):
    success: bool = True
    message: Optional[str] = None
    data: DataT


class ResumeListResponse(CamelModel):
    success: bool = True
    count: int
    data: List[ResumeResponse]
