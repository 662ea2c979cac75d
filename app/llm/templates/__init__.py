"""
Templates package for LLM prompts.
Contains the interviewer persona and the answer evaluation prompts.
"""

from .interviewer_templates import INTERVIEWER_TEMPLATES
from .evaluation_templates import EVALUATION_TEMPLATES

__all__ = ["INTERVIEWER_TEMPLATES", "EVALUATION_TEMPLATES", "ALL_TEMPLATES"]

ALL_TEMPLATES = {
    **INTERVIEWER_TEMPLATES,
    **EVALUATION_TEMPLATES
}
