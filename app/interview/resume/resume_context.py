"""
Resume context: extracts resume text (PDF, DOCX, TXT/MD) and builds the
profile block the interviewer uses to personalize questions.
"""

import logging
import os
import re
from typing import Optional
from urllib.parse import urlparse

import docx2txt
from pypdf import PdfReader

from app.interview import settings

logger = logging.getLogger(__name__)

MAX_CONTEXT_CHARS = 5000
MAX_RESUME_CHARS = 3500
RESUME_URL_PREFIX = "/uploads/resumes/"


def clean_text(value: str) -> str:
    """Drops carriage returns and collapses runs of blank lines."""
    value = value.replace("\r", "")
    value = re.sub(r"\n{3,}", "\n\n", value)
    return value.strip()


def resolve_resume_path(resume_ref: Optional[str]) -> Optional[str]:
    """
    Maps a resume reference to a local file path.

    Args:
        resume_ref: Upload URL ending in /uploads/resumes/<file>

    Returns:
        Path inside RESUME_UPLOAD_DIR, or None for anything that is not an upload URL
    """
    if not resume_ref:
        return None
    parsed = urlparse(resume_ref)
    if parsed.scheme in ("http", "https"):
        if not parsed.path.startswith(RESUME_URL_PREFIX):
            logger.warning(f"Resume URL outside the upload directory ignored: {resume_ref}")
            return None
        return os.path.join(settings.RESUME_UPLOAD_DIR, os.path.basename(parsed.path))
    logger.warning(f"Resume reference is not an upload URL, ignored: {resume_ref}")
    return None


def _read_pdf(path: str) -> str:
    reader = PdfReader(path)
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def read_resume_text(resume_ref: Optional[str]) -> str:
    """Resume text for an upload URL, or an empty string if it does not resolve."""
    path = resolve_resume_path(resume_ref)
    if not path:
        return ""
    return read_resume_file(path)


def read_resume_file(path: str) -> str:
    """
    Extracts plain text from a local resume file, truncated to MAX_RESUME_CHARS.
    Unsupported or unreadable files yield an empty string.
    """
    ext = os.path.splitext(path)[1].lower()
    try:
        if ext == ".pdf":
            text = _read_pdf(path)
        elif ext == ".docx":
            text = docx2txt.process(path) or ""
        elif ext in (".txt", ".md"):
            with open(path, encoding="utf-8") as f:
                text = f.read()
        else:
            logger.warning(f"Unsupported resume format: {ext}")
            return ""
    except Exception as e:
        logger.warning(f"Unable to parse resume {path}: {e}")
        return ""

    return clean_text(text)[:MAX_RESUME_CHARS]


def build_resume_context(
    resume_path: Optional[str] = None,
    cover_letter: Optional[str] = None,
    candidate_name: Optional[str] = None,
    position_title: Optional[str] = None,
) -> Optional[str]:
    """
    Builds the candidate profile block for the interviewer prompt.

    Args:
        resume_path: Resume upload URL
        cover_letter: Cover letter or free-form profile text
        candidate_name: Candidate name
        position_title: Title of the position applied for

    Returns:
        Context text of at most MAX_CONTEXT_CHARS, or None if nothing is known
    """
    parts = []
    if candidate_name:
        parts.append(f"Candidate name: {candidate_name}")
    if position_title:
        parts.append(f"Applied position: {position_title}")
    if cover_letter and cover_letter.strip():
        parts.append(f"Candidate cover/profile details:\n{clean_text(cover_letter)}")

    resume_text = read_resume_text(resume_path)
    if resume_text:
        parts.append(f"Resume extracted content (use this for personalized follow-up questions):\n{resume_text}")

    if not parts:
        return None
    return clean_text("\n\n".join(parts))[:MAX_CONTEXT_CHARS]


def _keywords(text: str) -> set:
    words = re.sub(r"[^\w\s]", " ", text.lower()).split()
    return {w for w in words if len(w) > 1}


def compute_resume_job_match_score(job_text: str, resume_text: str) -> int:
    """
    Share of job-description keywords that also appear in the resume, as 0..100.
    """
    job_words = _keywords(job_text or "")
    if not job_words:
        return 0
    resume_words = _keywords(resume_text or "")
    hits = len(job_words & resume_words)
    return round(min(100, hits / len(job_words) * 100))
