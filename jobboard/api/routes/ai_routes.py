"""
AI Routes

POST /generate-cover-letter - Four-part cover letter
POST /enhance-paragraph     - Rewrite one cover letter paragraph
POST /enhance-section       - Rewrite one resume section
POST /enhance-resume        - Structured suggestions for a whole resume
POST /generate-resume       - Enhanced copy of a resume document
POST /resume-analysis       - Upload a resume file and get structured feedback
POST /generate-docx         - DOCX rendering of a resume document
"""

import logging
import time
from contextlib import contextmanager

from fastapi import APIRouter, Depends, File, Response, UploadFile
from starlette.concurrency import run_in_threadpool

from jobboard.api.deps import get_ai_client, get_app_settings, get_storage
from jobboard.core.auth import require_session
from jobboard.core.config import Settings
from jobboard.core.errors import ConfigurationError, ExternalServiceError, ValidationFailed
from jobboard.schemas.schemas import (
    AuthSession, CoverLetterRequest, EnhanceParagraphRequest, EnhanceSectionRequest,
    GenerateResumeRequest, ResumeContent, ResumeSection
)
from jobboard.services import content_service
from jobboard.services.bootstrap_service import ensure_resume_bucket
from jobboard.services.docx_export import DOCX_MEDIA_TYPE, build_resume_docx, docx_filename
from jobboard.services.openai_client import CompletionClient
from jobboard.services.storage_service import SupabaseStorageClient
from jobboard.utils.file_upload import (
    CONTENT_TYPES, extract_text_or_describe, read_upload, storage_filename
)

log = logging.getLogger(__name__)

router = APIRouter(tags=["AI"])


@contextmanager
def model_failure(message: str):
    """Re-label a failed model call with the endpoint's own message."""
    try:
        yield
    except ExternalServiceError as e:
        raise ExternalServiceError(message, details=e.message)


# ============================================================
# COVER LETTERS
# ============================================================

@router.post("/generate-cover-letter")
def generate_cover_letter(
    req: CoverLetterRequest,
    session: AuthSession = Depends(require_session),
    ai: CompletionClient = Depends(get_ai_client)
):
    if req.personal_info is None or req.job_info is None:
        raise ValidationFailed("Personal info and job info are required")

    with model_failure("Failed to generate cover letter"):
        letter = content_service.generate_cover_letter(ai, req)

    return {"success": True, "coverLetter": letter.model_dump(by_alias=True)}


@router.post("/enhance-paragraph")
def enhance_paragraph(
    req: EnhanceParagraphRequest,
    session: AuthSession = Depends(require_session),
    ai: CompletionClient = Depends(get_ai_client)
):
    if not req.text or not req.paragraph_type:
        raise ValidationFailed("Text and paragraph type are required")

    with model_failure("Failed to enhance paragraph"):
        enhanced = content_service.enhance_paragraph(ai, req.text, req.paragraph_type, req.job_info)

    return {"success": True, "enhancedText": enhanced}


# ============================================================
# RESUMES
# ============================================================

@router.post("/enhance-section")
def enhance_section(
    req: EnhanceSectionRequest,
    session: AuthSession = Depends(require_session),
    ai: CompletionClient = Depends(get_ai_client)
):
    try:
        section = ResumeSection(req.section)
    except ValueError:
        raise ValidationFailed("Invalid section specified")

    with model_failure("Failed to enhance section. Please try again."):
        enhanced = content_service.enhance_section(ai, section, req.content, req.context)

    return {"enhancedContent": enhanced, "section": section.value}


@router.post("/enhance-resume")
def enhance_resume(
    resume: ResumeContent,
    session: AuthSession = Depends(require_session),
    ai: CompletionClient = Depends(get_ai_client)
):
    with model_failure("Failed to enhance resume. Please try again."):
        enhancement = content_service.enhance_resume(ai, resume)

    return enhancement.model_dump(by_alias=True)


@router.post("/generate-resume")
def generate_resume(
    req: GenerateResumeRequest,
    session: AuthSession = Depends(require_session),
    ai: CompletionClient = Depends(get_ai_client)
):
    if not req.resume_data:
        raise ValidationFailed("Resume data is required")

    with model_failure("Failed to generate resume"):
        enhanced = content_service.generate_resume(ai, req.resume_data)

    return {"success": True, "enhancedResume": enhanced}


@router.post("/generate-docx")
def generate_docx(resume: ResumeContent, session: AuthSession = Depends(require_session)):
    return Response(
        content=build_resume_docx(resume),
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{docx_filename(resume)}"'},
    )


@router.post("/resume-analysis")
async def resume_analysis(
    file: UploadFile = File(None),
    session: AuthSession = Depends(require_session),
    ai: CompletionClient = Depends(get_ai_client),
    storage: SupabaseStorageClient = Depends(get_storage),
    settings: Settings = Depends(get_app_settings)
):
    """
    Store the uploaded resume, extract its text and ask for structured feedback.

    Text extraction failures are not fatal: the model then reviews a short
    description of the file instead.
    """
    if not ai.configured:
        raise ConfigurationError("OpenAI API key not configured")

    content, ext = await read_upload(file)

    await run_in_threadpool(ensure_resume_bucket, storage, settings.resume_bucket)

    object_path = f"{session.user_id}/{int(time.time() * 1000)}_{storage_filename(file.filename)}"
    await run_in_threadpool(
        storage.upload, settings.resume_bucket, object_path, content, CONTENT_TYPES[ext]
    )
    file_url = storage.public_url(settings.resume_bucket, object_path)
    log.info("Resume file stored at %s", object_path)

    resume_text = await run_in_threadpool(extract_text_or_describe, content, file.filename)

    with model_failure("Failed to process resume"):
        feedback = await run_in_threadpool(content_service.analyze_resume, ai, resume_text)

    return {"success": True, "feedback": feedback.model_dump(by_alias=True), "fileUrl": file_url}
