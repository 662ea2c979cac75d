"""
Prompt store for the interviewer and evaluation prompts.
Templates are plain `str.format` strings keyed by name.
"""

from typing import Any, Dict, List

from app.llm.templates import ALL_TEMPLATES, EVALUATION_TEMPLATES, INTERVIEWER_TEMPLATES

TEMPLATES = ALL_TEMPLATES

TEMPLATE_GROUPS = {
    "interviewer": INTERVIEWER_TEMPLATES,
    "evaluation": EVALUATION_TEMPLATES,
}


def render_template(name: str, **vars: Any) -> str:
    """
    Format a template with provided variables or provide a helpful error message.

    Args:
        name: The name of the template to render
        **vars: Variables to insert into the template

    Returns:
        The formatted template string

    Raises:
        KeyError: If the template name doesn't exist
        ValueError: If a required template variable is missing
    """
    if name not in TEMPLATES:
        raise KeyError(f"Unknown template '{name}'.")
    try:
        return TEMPLATES[name].format(**vars)
    except KeyError as miss:
        raise ValueError(f"Missing template variable {miss}") from None


def render_chat(system_name: str, user_name: str, **vars: Any) -> List[Dict[str, str]]:
    """Renders a system/user message pair; `vars` are only applied to the user template."""
    return [
        {"role": "system", "content": render_template(system_name)},
        {"role": "user", "content": render_template(user_name, **vars)},
    ]


def list_template_names() -> Dict[str, List[str]]:
    """Template names per prompt group, sorted."""
    return {group: sorted(templates) for group, templates in TEMPLATE_GROUPS.items()}
