"""
DOCX rendering of a resume document (python-docx).
"""
import io
import re

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt, RGBColor

from jobboard.schemas.schemas import ResumeContent

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ACCENT = RGBColor(0x25, 0x63, 0xEB)
MUTED = RGBColor(0x6B, 0x72, 0x80)


def _heading(doc, text: str) -> None:
    para = doc.add_heading(level=2)
    run = para.add_run(text)
    run.font.color.rgb = ACCENT


def build_resume_docx(resume: ResumeContent) -> bytes:
    """Render the resume to DOCX bytes."""
    doc = Document()
    info = resume.personal_info

    name = doc.add_paragraph()
    name.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = name.add_run(info.full_name or "Your Name")
    run.bold = True
    run.font.size = Pt(16)
    run.font.color.rgb = ACCENT

    contact = [v for v in (info.email, info.phone, info.location, info.website) if v]
    if contact:
        para = doc.add_paragraph()
        para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = para.add_run(" • ".join(contact))
        run.font.size = Pt(10)
        run.font.color.rgb = MUTED

    if info.summary:
        _heading(doc, "PROFESSIONAL SUMMARY")
        para = doc.add_paragraph(info.summary)
        para.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY

    if resume.experiences:
        _heading(doc, "WORK EXPERIENCE")
        for exp in resume.experiences:
            para = doc.add_paragraph()
            para.add_run(exp.position or "Position").bold = True
            para.add_run(f" • {exp.company or 'Company'}")

            end = "Present" if exp.current else (exp.end_date or "")
            dates = doc.add_paragraph()
            dates_run = dates.add_run(f"{exp.start_date or ''} - {end}")
            dates_run.italic = True
            dates_run.font.color.rgb = MUTED

            if exp.description:
                doc.add_paragraph(exp.description)

    if resume.education:
        _heading(doc, "EDUCATION")
        for edu in resume.education:
            para = doc.add_paragraph()
            degree = " in ".join(v for v in (edu.degree, edu.field) if v) or "Degree"
            para.add_run(degree).bold = True
            if edu.school:
                para.add_run(f" • {edu.school}")

            details = [v for v in (edu.graduation_date, f"GPA: {edu.gpa}" if edu.gpa else None) if v]
            if details:
                meta = doc.add_paragraph().add_run(" | ".join(details))
                meta.italic = True
                meta.font.color.rgb = MUTED

            if edu.description:
                doc.add_paragraph(edu.description)

    if resume.skills or resume.skills_description:
        _heading(doc, "SKILLS")
        if resume.skills_description:
            doc.add_paragraph(resume.skills_description)
        names = [f"{s.name} ({s.level})" if s.level else s.name for s in resume.skills if s.name]
        if names:
            doc.add_paragraph(", ".join(names))

    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def docx_filename(resume: ResumeContent) -> str:
    name = re.sub(r"[^A-Za-z0-9]+", "_", resume.personal_info.full_name or "").strip("_") or "resume"
    return f"{name}_Resume.docx"
