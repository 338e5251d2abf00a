"""
File Upload Utility - Validate resume uploads and extract their text.

Supported formats:
- PDF (.pdf) using PyPDF2
- Word (.docx) using python-docx
- Legacy Word (.doc) accepted for storage, text not extracted
- Plain Text (.txt)

Max file size: 10MB
"""

import io
import logging
import re
from typing import Tuple

from docx import Document
from fastapi import UploadFile
from PyPDF2 import PdfReader

from jobboard.core.errors import ValidationFailed

log = logging.getLogger(__name__)

MAX_FILE_SIZE_MB = 10
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
ALLOWED_EXTENSIONS = {'.pdf', '.doc', '.docx', '.txt'}

CONTENT_TYPES = {
    '.pdf': 'application/pdf',
    '.doc': 'application/msword',
    '.docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    '.txt': 'text/plain',
}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def storage_filename(filename: str) -> str:
    """Last path segment of a client filename, limited to letters, digits, dot, dash and underscore."""
    base = re.split(r"[\\/]", filename)[-1]
    return re.sub(r"[^A-Za-z0-9._-]+", "_", base).strip("._") or "resume"


async def read_upload(file: UploadFile) -> Tuple[bytes, str]:
    """
    Read and validate an uploaded resume.

    Returns:
        Tuple of (content, extension)

    Raises:
        ValidationFailed on missing name, unsupported type or oversize file
    """
    if not file or not file.filename:
        raise ValidationFailed("No file uploaded")

    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationFailed("Invalid file type. Please upload a PDF, DOC, DOCX or TXT file")

    content = await file.read()

    if len(content) > MAX_FILE_SIZE_BYTES:
        raise ValidationFailed(
            f"File size too large. Please upload a file smaller than {MAX_FILE_SIZE_MB}MB"
        )
    if not content:
        raise ValidationFailed("Uploaded file is empty")

    return content, ext


def extract_text(content: bytes, ext: str) -> str:
    """
    Extract text by file type.
    Raises ValueError when nothing can be extracted.
    """
    if ext == '.pdf':
        text = extract_from_pdf(content)
    elif ext == '.docx':
        text = extract_from_docx(content)
    elif ext == '.txt':
        text = extract_from_txt(content)
    else:
        raise ValueError(f"Text extraction not supported for {ext}")

    if not text.strip():
        raise ValueError("File may be empty or corrupted")
    return text


def extract_text_or_describe(content: bytes, filename: str) -> str:
    """Extracted text, or a short description of the file when extraction fails."""
    ext = get_file_extension(filename)
    try:
        return extract_text(content, ext)
    except ValueError as e:
        log.warning("Could not extract text from %s: %s", filename, e)
        return f"Resume file: {filename} ({ext.lstrip('.')} format, {len(content) / 1024:.2f} KB)"


def extract_from_pdf(content: bytes) -> str:
    """Extract text from PDF bytes."""
    try:
        reader = PdfReader(io.BytesIO(content))
        text_parts = []
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
        return '\n'.join(text_parts)
    except Exception as e:
        raise ValueError(f"Error reading PDF: {e}")


def extract_from_docx(content: bytes) -> str:
    """Extract text from DOCX bytes."""
    try:
        doc = Document(io.BytesIO(content))
    except Exception as e:
        raise ValueError(f"Error reading DOCX: {e}")

    text_parts = [para.text for para in doc.paragraphs if para.text.strip()]

    for table in doc.tables:
        for row in table.rows:
            row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if row_text:
                text_parts.append(' | '.join(row_text))

    return '\n'.join(text_parts)


def extract_from_txt(content: bytes) -> str:
    """Extract text from TXT bytes."""
    for encoding in ['utf-8', 'cp1252', 'latin-1']:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ValueError("Could not decode text file")
