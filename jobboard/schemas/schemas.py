"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Resume documents and AI payloads use camelCase on the wire (the front end
stores resumes in that shape); table projections use the column names.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Any, Dict, Union
from datetime import datetime
from enum import Enum
from uuid import UUID


# ============================================================
# ENUMS
# ============================================================

class UserType(str, Enum):
    individual = "individual"
    company = "company"


class JobType(str, Enum):
    full_time = "FULL_TIME"
    part_time = "PART_TIME"
    contract = "CONTRACT"
    internship = "INTERNSHIP"


class JobStatus(str, Enum):
    draft = "DRAFT"
    published = "PUBLISHED"
    closed = "CLOSED"


class ApplicationStatus(str, Enum):
    new = "NEW"
    shortlisted = "SHORTLISTED"
    rejected = "REJECTED"
    hired = "HIRED"
    waitlist = "WAITLIST"


class ParagraphType(str, Enum):
    introduction = "introduction"
    body_paragraph1 = "bodyParagraph1"
    body_paragraph2 = "bodyParagraph2"
    closing = "closing"


class ResumeSection(str, Enum):
    summary = "summary"
    experience = "experience"
    education = "education"
    skills = "skills"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# AUTH SCHEMAS
# ============================================================

class AuthSession(BaseModel):
    user_id: UUID
    email: str = ""
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    refreshed: bool = False

    @property
    def claims(self) -> dict:
        """JWT claims installed on per-request database sessions."""
        return {"sub": str(self.user_id), "email": self.email, "role": "authenticated"}


class UserProfile(BaseModel):
    id: UUID
    email: str
    user_type: UserType = UserType.individual
    company_id: Optional[UUID] = None

    @property
    def claims(self) -> dict:
        return {"sub": str(self.id), "email": self.email, "role": "authenticated"}


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    location: Optional[str] = None


class CompanyResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    location: Optional[str] = None
    created_at: datetime


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    required_skills: List[str] = []
    location: str = Field(..., min_length=1)
    job_type: JobType = JobType.full_time
    salary_range: Optional[str] = None
    status: JobStatus = JobStatus.draft


class JobStatusUpdate(BaseModel):
    status: JobStatus


class JobSummary(BaseModel):
    id: UUID
    title: str
    company: str
    company_name: str
    location: str
    salary_range: str
    type: str
    description: str
    requirements: List[str] = []
    posted: str
    created_at: datetime
    status: JobStatus
    company_id: UUID


class JobListResponse(BaseModel):
    jobs: List[JobSummary]


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplyJobRequest(CamelModel):
    job_id: Optional[UUID] = None
    resume_id: Optional[UUID] = None
    resume_url: Optional[str] = None
    cover_letter_url: Optional[str] = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


class ApplicationRecord(BaseModel):
    id: UUID
    job_id: UUID
    applicant_id: UUID
    resume_url: str
    cover_letter_url: Optional[str] = None
    status: ApplicationStatus
    matching_score: Optional[float] = None
    created_at: datetime
    updated_at: datetime


class MyApplication(BaseModel):
    id: UUID
    job_id: UUID
    job_title: str
    company_name: str
    applied_at: datetime
    status: str


class MyApplicationsResponse(BaseModel):
    applications: List[MyApplication]
    success: bool = True


class CompanyApplication(ApplicationRecord):
    job_title: str
    company_name: str
    applicant_email: Optional[str] = None
    candidate_name: str
    resume_id: Optional[str] = None


class CompanyApplicationsResponse(BaseModel):
    applications: List[CompanyApplication]
    total: int


class MatchCandidatesRequest(CamelModel):
    job_id: Optional[UUID] = None


# ============================================================
# RESUME SCHEMAS
# ============================================================

class ResumeWrite(BaseModel):
    content: Optional[Dict[str, Any]] = None
    feedback: Optional[Any] = None


class ResumeRecord(BaseModel):
    id: UUID
    user_id: UUID
    content: Dict[str, Any]
    feedback: Optional[Any] = None
    created_at: datetime
    updated_at: datetime


class ResumeListResponse(BaseModel):
    resumes: List[ResumeRecord]
    total: int


class PersonalInfo(CamelModel):
    model_config = ConfigDict(extra="allow")

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    summary: Optional[str] = None


class Experience(CamelModel):
    id: Union[str, int, None] = None
    position: Optional[str] = None
    company: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    current: bool = False
    description: Optional[str] = None


class Education(CamelModel):
    id: Union[str, int, None] = None
    degree: Optional[str] = None
    field: Optional[str] = None
    school: Optional[str] = None
    graduation_date: Optional[str] = None
    gpa: Union[str, float, None] = None
    description: Optional[str] = None


class Skill(CamelModel):
    name: str = ""
    level: Optional[str] = None


class ResumeContent(CamelModel):
    """The resume builder document stored in resumes.content."""
    model_config = ConfigDict(extra="allow")

    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    experiences: List[Experience] = []
    education: List[Education] = []
    skills: List[Skill] = []
    skills_description: Optional[str] = None


# ============================================================
# AI SCHEMAS
# ============================================================

class JobInfo(CamelModel):
    position: Optional[str] = None
    company: Optional[str] = None
    hiring_manager: Optional[str] = None
    job_source: Optional[str] = None


class CoverLetterRequest(CamelModel):
    personal_info: Optional[PersonalInfo] = None
    job_info: Optional[JobInfo] = None
    user_background: Optional[str] = None


class CoverLetter(CamelModel):
    introduction: str = Field(..., min_length=1)
    body_paragraph1: str = Field(..., min_length=1)
    body_paragraph2: str = Field(..., min_length=1)
    closing: str = Field(..., min_length=1)


class EnhanceParagraphRequest(CamelModel):
    text: Optional[str] = None
    paragraph_type: Optional[str] = None
    job_info: Optional[JobInfo] = None


class EnhanceSectionRequest(CamelModel):
    section: Optional[str] = None
    content: str = ""
    context: Dict[str, Any] = {}


class EnhancedItem(CamelModel):
    id: Union[str, int, None] = None
    description: str


class ResumeEnhancement(CamelModel):
    summary: str
    improvements: List[str]
    keywords: List[str]
    enhanced_experiences: List[EnhancedItem] = []
    enhanced_education: List[EnhancedItem] = []
    enhanced_skills_description: str
    suggested_skills: List[str] = []
    overall_score: Union[str, float]


class GenerateResumeRequest(CamelModel):
    resume_data: Optional[Dict[str, Any]] = None


class SectionScore(CamelModel):
    score: float
    feedback: str
    strengths: List[str] = []
    improvements: List[str] = []


class SectionAnalysis(CamelModel):
    structure: SectionScore
    language: SectionScore
    experience_match: SectionScore
    skills_presentation: SectionScore
    education: SectionScore


class PrioritySuggestions(CamelModel):
    category: str
    suggestions: List[str] = []


class AtsCompatibility(CamelModel):
    score: float
    feedback: str
    issues: List[str] = []
    recommendations: List[str] = []


class IndustryRelevance(CamelModel):
    detected_industry: str = "General"
    relevance_score: float
    feedback: str
    keywords: List[str] = []


class ResumeFeedback(CamelModel):
    overall_score: float
    summary: str
    section_analysis: SectionAnalysis
    missing_elements: List[str] = []
    improvement_suggestions: List[PrioritySuggestions] = []
    ats_compatibility: AtsCompatibility
    industry_relevance: IndustryRelevance


class CandidateScore(CamelModel):
    final_score: float = Field(..., ge=0, le=100)


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
