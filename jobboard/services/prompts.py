"""
Prompt templates for the AI generators.

Each builder takes validated request models and returns the user prompt;
system prompts are module constants.
"""
import json
from typing import List

from jobboard.schemas.schemas import (
    CoverLetterRequest, JobInfo, ParagraphType, ResumeContent, ResumeSection
)

COVER_LETTER_SYSTEM = (
    "You are a professional career counselor and expert cover letter writer. "
    "Generate compelling, personalized cover letters that help candidates stand out."
)

PARAGRAPH_SYSTEM = (
    "You are a professional career counselor and expert cover letter writer. "
    "Enhance cover letter paragraphs to be more compelling, specific, and professional "
    "while maintaining the original intent and tone."
)

SECTION_SYSTEM = (
    "You are a professional resume expert and career counselor. Provide enhanced, "
    "professional content that is natural, compelling, and tailored to job market expectations."
)

ENHANCE_RESUME_SYSTEM = (
    "You are a professional resume expert and career counselor. Provide detailed, "
    "actionable advice to improve resumes. Always respond with valid JSON."
)

GENERATE_RESUME_SYSTEM = (
    "You are a professional resume writer with expertise in creating compelling resumes "
    "that pass ATS systems and attract hiring managers. Focus on quantifiable achievements, "
    "action verbs, and industry-specific keywords."
)

MATCH_JOBS_SYSTEM = (
    "You are a professional career advisor and job matching expert. Provide accurate, "
    "helpful job matching analysis. Always respond with valid JSON."
)

CANDIDATE_SYSTEM = "You are an expert recruiter. Always respond with valid JSON."

RESUME_REVIEW_SYSTEM = """You are a professional resume reviewer with 15+ years of experience in hiring and recruitment across various industries.
Analyze the resume comprehensively and provide detailed, actionable feedback.

Respond with a JSON object containing:
{
  "overallScore": number (0-100),
  "summary": "2-3 sentence overall assessment",
  "sectionAnalysis": {
    "structure": {"score": number, "feedback": "...", "strengths": [], "improvements": []},
    "language": {"score": number, "feedback": "...", "strengths": [], "improvements": []},
    "experienceMatch": {"score": number, "feedback": "...", "strengths": [], "improvements": []},
    "skillsPresentation": {"score": number, "feedback": "...", "strengths": [], "improvements": []},
    "education": {"score": number, "feedback": "...", "strengths": [], "improvements": []}
  },
  "missingElements": ["element 1", "element 2"],
  "improvementSuggestions": [
    {"category": "High Priority", "suggestions": []},
    {"category": "Medium Priority", "suggestions": []},
    {"category": "Low Priority", "suggestions": []}
  ],
  "atsCompatibility": {"score": number, "feedback": "...", "issues": [], "recommendations": []},
  "industryRelevance": {"detectedIndustry": "detected industry or 'General'", "relevanceScore": number, "feedback": "...", "keywords": []}
}

Provide specific, actionable feedback that will help the candidate improve their resume."""


def _or(value, default: str) -> str:
    return str(value) if value not in (None, "") else default


def cover_letter_prompt(req: CoverLetterRequest) -> str:
    info = req.personal_info
    job = req.job_info
    return f"""Generate a professional cover letter with the following information:

Personal Information:
- Name: {_or(info.full_name, "")}
- Email: {_or(info.email, "")}
- Phone: {_or(info.phone, "")}
- Address: {_or(info.address, "")}

Job Information:
- Position: {_or(job.position, "")}
- Company: {_or(job.company, "")}
- Hiring Manager: {_or(job.hiring_manager, "Hiring Manager")}
- Job Source: {_or(job.job_source, "job search")}

User Background: {_or(req.user_background, "Not provided")}

Please generate a cover letter with these 4 sections:
1. Introduction paragraph - Express interest in the position and mention how you found it
2. Body paragraph 1 - Highlight relevant experience, skills, and achievements
3. Body paragraph 2 - Explain why you want to work for this specific company and how you can contribute
4. Closing paragraph - Thank them and express enthusiasm for next steps

Make it professional, engaging, and tailored to the specific position and company.

Return the response in this exact JSON format:
{{
  "introduction": "...",
  "bodyParagraph1": "...",
  "bodyParagraph2": "...",
  "closing": "..."
}}"""


PARAGRAPH_INSTRUCTIONS = {
    ParagraphType.introduction: (
        "Enhance this cover letter introduction paragraph{ctx}. Make it more engaging, "
        "professional, and compelling while maintaining the core message. Keep it concise but impactful"
    ),
    ParagraphType.body_paragraph1: (
        "Enhance this cover letter body paragraph about experience and skills{ctx}. Make it more "
        "specific, quantifiable, and compelling. Focus on achievements and relevant qualifications"
    ),
    ParagraphType.body_paragraph2: (
        "Enhance this cover letter body paragraph about company interest{ctx}. Make it more specific "
        "about why the candidate wants to work for this company and how they can contribute"
    ),
    ParagraphType.closing: (
        "Enhance this cover letter closing paragraph{ctx}. Make it more professional, confident, "
        "and action-oriented while maintaining appropriate courtesy"
    ),
}

GENERIC_PARAGRAPH_INSTRUCTION = (
    "Enhance this cover letter paragraph{ctx}. Make it more professional, engaging, and compelling"
)


def paragraph_prompt(text: str, paragraph_type: str, job_info: JobInfo = None) -> str:
    ctx = ""
    if job_info is not None:
        ctx = f" for a {_or(job_info.position, 'open')} position at {_or(job_info.company, 'the company')}"

    try:
        template = PARAGRAPH_INSTRUCTIONS[ParagraphType(paragraph_type)]
    except ValueError:
        template = GENERIC_PARAGRAPH_INSTRUCTION

    return f'{template.format(ctx=ctx)}:\n\nOriginal: "{text}"\n\nEnhanced version:'


def section_prompt(section: ResumeSection, content: str, context: dict) -> str:
    c = context or {}

    if section == ResumeSection.summary:
        return f"""Enhance this professional summary to be more compelling and professional:

Current Summary: "{content}"

Context:
- Name: {_or(c.get("fullName"), "Professional")}
- Experience Level: {_or(c.get("experienceCount"), "0")} positions
- Education: {_or(c.get("educationLevel"), "Not specified")}
- Key Skills: {_or(c.get("topSkills"), "Various skills")}

Please provide an enhanced professional summary that is 2-3 sentences long, uses strong
action-oriented language and highlights key value propositions.

Return only the enhanced summary text, no additional formatting or explanations."""

    if section == ResumeSection.experience:
        return f"""Enhance this work experience description to be more impactful and professional:

Current Description: "{content}"

Position Context:
- Job Title: {_or(c.get("position"), "Professional Role")}
- Company: {_or(c.get("company"), "Company")}
- Duration: {_or(c.get("duration"), "Time period")}

Please provide an enhanced description that uses strong action verbs, includes quantifiable
achievements where possible and is formatted as bullet points (use • for bullets).

Return only the enhanced description text, no additional formatting or explanations."""

    if section == ResumeSection.education:
        return f"""Enhance this education description to be more compelling and relevant:

Current Description: "{content}"

Education Context:
- Degree: {_or(c.get("degree"), "Degree")}
- Field: {_or(c.get("field"), "Field of Study")}
- School: {_or(c.get("school"), "Institution")}
- GPA: {_or(c.get("gpa"), "Not specified")}

Please provide an enhanced description that highlights relevant coursework, projects, or
achievements and connects education to career goals.

Return only the enhanced description text, no additional formatting or explanations."""

    return f"""Enhance this skills overview to be more compelling and professional:

Current Skills Overview: "{content}"

Skills Context:
- Individual Skills: {_or(c.get("skillsList"), "Various technical skills")}
- Experience Level: {_or(c.get("experienceLevel"), "Professional level")}
- Industry Focus: {_or(c.get("industry"), "General professional")}

Please provide an enhanced skills overview (2-3 sentences) that showcases technical expertise
and highlights both technical and soft skills.

Return only the enhanced skills overview text, no additional formatting or explanations."""


def _experience_lines(resume: ResumeContent) -> str:
    lines = []
    for i, exp in enumerate(resume.experiences, 1):
        end = "Present" if exp.current else _or(exp.end_date, "")
        lines.append(
            f"{i}. {_or(exp.position, '')} at {_or(exp.company, '')}\n"
            f"   Duration: {_or(exp.start_date, '')} - {end}\n"
            f"   Description: {_or(exp.description, 'Not provided')}"
        )
    return "\n".join(lines) or "None"


def _education_lines(resume: ResumeContent) -> str:
    lines = []
    for i, edu in enumerate(resume.education, 1):
        lines.append(
            f"{i}. {_or(edu.degree, '')} in {_or(edu.field, '')} from {_or(edu.school, '')}\n"
            f"   Graduation: {_or(edu.graduation_date, '')}\n"
            f"   GPA: {_or(edu.gpa, 'Not provided')}\n"
            f"   Description: {_or(edu.description, 'Not provided')}"
        )
    return "\n".join(lines) or "None"


def _skill_list(resume: ResumeContent) -> str:
    return ", ".join(
        f"{s.name} ({s.level})" if s.level else s.name for s in resume.skills if s.name
    ) or "None"


def enhance_resume_prompt(resume: ResumeContent) -> str:
    info = resume.personal_info
    return f"""Please analyze and enhance the following resume content:

PERSONAL INFO:
Name: {_or(info.full_name, "Not provided")}
Email: {_or(info.email, "Not provided")}
Phone: {_or(info.phone, "Not provided")}
Location: {_or(info.location, "Not provided")}
Website: {_or(info.website, "Not provided")}
Current Summary: {_or(info.summary, "Not provided")}

WORK EXPERIENCE:
{_experience_lines(resume)}

EDUCATION:
{_education_lines(resume)}

SKILLS:
Skills Overview: {_or(resume.skills_description, "Not provided")}
Individual Skills: {_skill_list(resume)}

Please provide a JSON response with the following structure:
{{
  "summary": "An enhanced, compelling professional summary (2-3 sentences)",
  "improvements": ["List of 3-5 specific improvement suggestions"],
  "keywords": ["List of 8-12 relevant industry keywords to include"],
  "enhancedExperiences": [{{"id": "original_id", "description": "Enhanced description"}}],
  "enhancedEducation": [{{"id": "original_id", "description": "Enhanced description"}}],
  "enhancedSkillsDescription": "Enhanced skills overview",
  "suggestedSkills": ["List of 5-8 additional relevant skills to consider"],
  "overallScore": "A score from 1-10 with brief explanation"
}}"""


def generate_resume_prompt(resume_data: dict) -> str:
    return f"""Based on the following resume data, generate a professional, well-structured resume content. Make it compelling, well-formatted, and highlight achievements quantitatively where possible.

Resume Data:
{json.dumps(resume_data, indent=2, default=str)}

Please generate:
1. A compelling professional summary (2-3 sentences)
2. Enhanced work experience descriptions with quantified achievements
3. Improved education section formatting
4. Optimized skills presentation
5. Overall content improvements for ATS compatibility

Return the response as a JSON object with the same structure as the input but with enhanced content."""


def match_jobs_prompt(resume: ResumeContent, jobs: List[dict]) -> str:
    job_lines = "\n".join(
        f"{i}. [{job['id']}] {job['title']} at {job['company']}\n"
        f"   Location: {job['location']}\n"
        f"   Salary: {job['salary_range']}\n"
        f"   Description: {job['description']}\n"
        f"   Requirements: {', '.join(job['requirements'])}"
        for i, job in enumerate(jobs, 1)
    )
    info = resume.personal_info
    return f"""You are an AI job matching expert. Analyze this resume and match it with the following job postings.

RESUME DATA:
Name: {_or(info.full_name, "Not provided")}
Summary: {_or(info.summary, "Not provided")}

Work Experience:
{_experience_lines(resume)}

Education:
{_education_lines(resume)}

Skills:
{_skill_list(resume)}

AVAILABLE JOBS:
{job_lines}

For each job, provide a match score (0-100) and reasons why it matches or doesn't match.

Respond with a JSON object in this format:
{{"matches": [
  {{
    "jobId": "job id shown in brackets",
    "matchScore": 85,
    "matchReasons": ["Strong React skills match"],
    "improvementSuggestions": ["Consider learning TypeScript"]
  }}
]}}

Sort by match score (highest first) and include only jobs with score >= 25."""


def candidate_prompt(job: dict, resume_text: str) -> str:
    return f"""Analyze how well the candidate's resume matches the job requirements.

Job Description:
{job["description"]}

Required Skills:
{", ".join(job.get("requirements") or [])}

Resume:
{resume_text}

Analyze the match based on:
1. Required skills match (40% weight)
2. Experience relevance (30% weight)
3. Overall qualification fit (20% weight)
4. Communication and presentation (10% weight)

Format your response as JSON with the following structure:
{{
  "skillsMatch": {{"score": number, "justification": string}},
  "experienceRelevance": {{"score": number, "justification": string}},
  "qualificationFit": {{"score": number, "justification": string}},
  "communication": {{"score": number, "justification": string}},
  "finalScore": number
}}"""


def resume_review_prompt(resume_text: str) -> str:
    return f"Please analyze this resume and provide comprehensive feedback: {resume_text}"


def resume_text(resume: ResumeContent) -> str:
    """Plain-text rendering of a resume document for scoring prompts."""
    info = resume.personal_info
    return f"""Name: {_or(info.full_name, "Not provided")}
Summary: {_or(info.summary, "Not provided")}

Work Experience:
{_experience_lines(resume)}

Education:
{_education_lines(resume)}

Skills: {_skill_list(resume)}
Skills Overview: {_or(resume.skills_description, "Not provided")}"""
