"""
AI Content Service - cover letters, paragraph/section enhancement, resume
enhancement and resume review.

Every structured output is decoded in two steps:
1. parse_*(): decode the model text into the fixed pydantic schema
2. fallback_*(): a pure function that builds the same schema from the
   request alone

The generate_*() functions call the model once, then try the parser and use
the fallback when it fails, so callers always receive a complete structure.
Model/credential failures are not masked: they propagate as APIError.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from jobboard.schemas.schemas import (
    AtsCompatibility, CandidateScore, CoverLetter, CoverLetterRequest,
    EnhancedItem, IndustryRelevance, JobInfo, PrioritySuggestions,
    ResumeContent, ResumeEnhancement, ResumeFeedback, ResumeSection,
    SectionAnalysis, SectionScore
)
from jobboard.services import prompts
from jobboard.services.openai_client import CompletionClient, extract_json

log = logging.getLogger(__name__)


# ============================================================
# COVER LETTER
# ============================================================

def parse_cover_letter(text: str) -> Optional[CoverLetter]:
    """Decode the model's JSON answer. None if it is not a complete letter."""
    try:
        return CoverLetter.model_validate(extract_json(text))
    except (ValueError, ValidationError) as e:
        log.info("Cover letter parse failed, using template: %s", e)
        return None


def fallback_cover_letter(req: CoverLetterRequest) -> CoverLetter:
    """Template letter built from the request fields only."""
    job = req.job_info or JobInfo()
    position = job.position or "open"
    company = job.company or "your company"
    name = (req.personal_info.full_name if req.personal_info else None) or ""

    source = f"I discovered this opportunity through {job.job_source} and " if job.job_source else ""

    return CoverLetter(
        introduction=(
            f"I am writing to express my strong interest in the {position} position at {company}. "
            f"{source}I am excited about the possibility of contributing to your team."
        ),
        body_paragraph1=(
            "With my background and experience, I believe I would be a valuable addition to your "
            "organization. My skills and dedication make me well-suited for this role, and I am eager "
            f"to bring my expertise to help {company} achieve its goals."
        ),
        body_paragraph2=(
            f"I am particularly drawn to {company} because of its reputation and commitment to "
            "excellence. I am confident that my passion and skills align well with your company's "
            "values and objectives, and I would welcome the opportunity to contribute to your "
            "continued success."
        ),
        closing=(
            "Thank you for considering my application. I would welcome the opportunity to discuss "
            f"how my background and enthusiasm can contribute to {company}. I look forward to "
            f"hearing from you soon.\n\nSincerely,\n{name}"
        ).rstrip(),
    )


def generate_cover_letter(client: CompletionClient, req: CoverLetterRequest) -> CoverLetter:
    text = client.complete(
        prompts.cover_letter_prompt(req),
        system_prompt=prompts.COVER_LETTER_SYSTEM,
        max_tokens=1500,
        temperature=0.7,
    )
    return parse_cover_letter(text) or fallback_cover_letter(req)


# ============================================================
# PARAGRAPH / SECTION ENHANCEMENT
# ============================================================

def enhance_paragraph(
    client: CompletionClient,
    text: str,
    paragraph_type: str,
    job_info: Optional[JobInfo] = None
) -> str:
    return client.complete(
        prompts.paragraph_prompt(text, paragraph_type, job_info),
        system_prompt=prompts.PARAGRAPH_SYSTEM,
        max_tokens=500,
        temperature=0.7,
    )


def enhance_section(client: CompletionClient, section: ResumeSection, content: str, context: dict) -> str:
    return client.complete(
        prompts.section_prompt(section, content, context),
        system_prompt=prompts.SECTION_SYSTEM,
        max_tokens=500,
        temperature=0.7,
    )


# ============================================================
# RESUME ENHANCEMENT
# ============================================================

def parse_resume_enhancement(text: str) -> Optional[ResumeEnhancement]:
    try:
        return ResumeEnhancement.model_validate(extract_json(text))
    except (ValueError, ValidationError) as e:
        log.info("Resume enhancement parse failed, using template: %s", e)
        return None


def fallback_resume_enhancement(resume: ResumeContent) -> ResumeEnhancement:
    summary = resume.personal_info.summary
    if summary:
        summary = (
            f"{summary} Enhanced with AI-driven insights, this professional demonstrates strong "
            "capabilities in their field with proven experience and technical expertise."
        )
    else:
        summary = (
            "Dynamic professional with demonstrated expertise and a track record of delivering "
            "results in challenging environments. Skilled in collaborative problem-solving and "
            "innovative solutions."
        )

    experiences = []
    for exp in resume.experiences:
        position = exp.position or "their"
        if exp.description:
            description = (
                f"• Achieved measurable results in {position} role at {exp.company or 'the company'}\n"
                "• Led cross-functional initiatives that improved operational efficiency\n"
                "• Collaborated with diverse teams to deliver high-impact projects"
            )
        else:
            description = (
                f"• Managed key responsibilities in {position} role with proven success\n"
                "• Developed innovative solutions to complex business challenges\n"
                "• Built strong relationships with stakeholders and team members"
            )
        experiences.append(EnhancedItem(id=exp.id, description=description))

    education = [
        EnhancedItem(
            id=edu.id,
            description=(
                f"Relevant coursework and projects in {edu.field or 'the field'}. Developed strong "
                "analytical and problem-solving skills through academic research and practical applications."
            ),
        )
        for edu in resume.education
    ]

    return ResumeEnhancement(
        summary=summary,
        improvements=[
            "Add quantifiable achievements with specific numbers and percentages",
            "Use stronger action verbs to start each bullet point",
            "Include industry-specific keywords for better ATS compatibility",
            "Highlight leadership and collaboration experiences",
            "Add relevant certifications or technical proficiencies",
        ],
        keywords=[
            "Leadership", "Project Management", "Data Analysis", "Problem Solving",
            "Team Collaboration", "Strategic Planning", "Process Improvement", "Communication",
        ],
        enhanced_experiences=experiences,
        enhanced_education=education,
        enhanced_skills_description=resume.skills_description or (
            "Comprehensive technical skill set with expertise in modern tools and methodologies. "
            "Proven ability to adapt to new technologies and deliver high-quality results."
        ),
        suggested_skills=[
            "Project Management", "Data Analysis", "Leadership", "Communication",
            "Problem Solving", "Team Collaboration", "Strategic Planning",
        ],
        overall_score=(
            "7/10 - Strong foundation with excellent potential for enhancement through "
            "quantifiable achievements and keyword optimization"
        ),
    )


def enhance_resume(client: CompletionClient, resume: ResumeContent) -> ResumeEnhancement:
    text = client.complete(
        prompts.enhance_resume_prompt(resume),
        system_prompt=prompts.ENHANCE_RESUME_SYSTEM,
        max_tokens=2000,
        temperature=0.7,
    )
    return parse_resume_enhancement(text) or fallback_resume_enhancement(resume)


def generate_resume(client: CompletionClient, resume_data: dict) -> dict:
    """
    Ask for an enhanced copy of the resume document.
    A non-JSON answer is returned alongside the original data.
    """
    text = client.complete(
        prompts.generate_resume_prompt(resume_data),
        system_prompt=prompts.GENERATE_RESUME_SYSTEM,
        max_tokens=2000,
        temperature=0.7,
    )
    try:
        parsed = extract_json(text)
    except ValueError:
        parsed = None

    if isinstance(parsed, dict):
        return parsed
    return {**resume_data, "aiEnhanced": True, "enhancedContent": text}


# ============================================================
# RESUME REVIEW
# ============================================================

def parse_resume_feedback(text: str) -> Optional[ResumeFeedback]:
    try:
        return ResumeFeedback.model_validate(extract_json(text))
    except (ValueError, ValidationError) as e:
        log.info("Resume feedback parse failed, using template: %s", e)
        return None


def fallback_resume_feedback() -> ResumeFeedback:
    return ResumeFeedback(
        overall_score=75,
        summary="Resume analysis completed. Please review the detailed feedback below.",
        section_analysis=SectionAnalysis(
            structure=SectionScore(score=75, feedback="Resume structure appears adequate."),
            language=SectionScore(score=80, feedback="Language and tone are professional."),
            experience_match=SectionScore(score=70, feedback="Experience section needs enhancement."),
            skills_presentation=SectionScore(score=75, feedback="Skills are clearly presented."),
            education=SectionScore(score=80, feedback="Education section is well-formatted."),
        ),
        missing_elements=["Quantified achievements", "Professional summary", "Relevant keywords"],
        improvement_suggestions=[
            PrioritySuggestions(category="High Priority", suggestions=["Add quantified results to experience section"]),
            PrioritySuggestions(category="Medium Priority", suggestions=["Improve professional summary"]),
            PrioritySuggestions(category="Low Priority", suggestions=["Optimize formatting"]),
        ],
        ats_compatibility=AtsCompatibility(score=70, feedback="Resume should be more ATS-friendly."),
        industry_relevance=IndustryRelevance(
            relevance_score=70,
            feedback="Resume appears suitable for general applications.",
        ),
    )


def analyze_resume(client: CompletionClient, resume_text: str) -> ResumeFeedback:
    text = client.complete(
        prompts.resume_review_prompt(resume_text),
        system_prompt=prompts.RESUME_REVIEW_SYSTEM,
        max_tokens=2500,
        temperature=0.3,
        json_mode=True,
    )
    return parse_resume_feedback(text) or fallback_resume_feedback()


# ============================================================
# CANDIDATE SCORING
# ============================================================

def score_candidate(client: CompletionClient, job: dict, resume_text: str) -> int:
    """
    Weighted 0-100 fit of one resume against a posting.
    Raises ValueError/ValidationError if the answer has no usable finalScore.
    """
    text = client.complete(
        prompts.candidate_prompt(job, resume_text),
        system_prompt=prompts.CANDIDATE_SYSTEM,
        max_tokens=800,
        temperature=0.3,
        json_mode=True,
    )
    return round(CandidateScore.model_validate(extract_json(text)).final_score)
