"""
Utility functions for LLM requests and responses.
"""

import json
import re
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

JSON_INSTRUCTION = "Please respond with a valid JSON object."


def strip_code_fences(text: str) -> str:
    """Removes markdown code fences (```json ... ```) anywhere in the text."""
    text = re.sub(r"```(?:json)?\s*", "", text)
    return text.strip()


def clean_json_response(text: str) -> Optional[str]:
    """
    Cleans and repairs JSON responses from LLMs.
    Handles common issues like markdown formatting, invalid quotes,
    trailing commas, and extensive model reasoning.

    Args:
        text: The LLM response to clean

    Returns:
        Clean JSON-compliant string, or None if no JSON object could be recovered
    """
    original_text = text
    text = (text or "").strip()

    # Remove extensive LLM "thinking" processes
    if text.startswith("<think>"):
        think_end = text.find("</think>")
        if think_end != -1:
            text = text[think_end + 8:].strip()
            logger.debug("Removed <think> block from response")

    text = strip_code_fences(text)

    try:
        # Test parse - if successful, no further repairs needed
        json.loads(text)
        return text
    except json.JSONDecodeError:
        logger.warning("JSON repair required for malformed response")
        logger.debug(f"Original content (truncated): {_truncate_for_log(original_text or '', max_length=200)}")

        # Find first and last brace pair
        first = text.find("{")
        last = text.rfind("}")
        if first == -1 or last == -1 or last < first:
            return None
        text = text[first:last + 1]

        text = _fix_common_json_errors(text)

        try:
            json.loads(text)
            logger.debug("JSON repair successful")
            return text
        except json.JSONDecodeError:
            return None


def parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Parses an LLM response into a dictionary.

    Returns:
        The parsed object, or None if the response holds no JSON object
    """
    cleaned = clean_json_response(text)
    if cleaned is None:
        return None
    parsed = json.loads(cleaned)
    if not isinstance(parsed, dict):
        logger.error(f"Parsed data is not a dictionary: {type(parsed)}")
        return None
    return parsed


def ensure_json_instruction_in_messages(messages: List[Dict[str, str]]) -> List[Dict[str, str]]:
    """
    Ensures that messages contain an instruction to output JSON.
    OpenAI requires the word "json" in the prompt when JSON mode is used.
    """
    has_json_instruction = any("json" in str(msg.get("content", "")).lower() for msg in messages)
    if has_json_instruction:
        return messages

    messages = [dict(m) for m in messages]
    for msg in messages:
        if msg.get("role") == "system":
            msg["content"] = f"{msg['content']} {JSON_INSTRUCTION}"
            return messages

    messages.insert(0, {"role": "system", "content": JSON_INSTRUCTION})
    return messages


def _fix_common_json_errors(text: str) -> str:
    """
    Fixes common JSON errors in LLM outputs.

    Args:
        text: The JSON string to repair

    Returns:
        Repaired JSON string
    """
    # Remove BOM
    text = text.replace("\ufeff", "")

    # Replace single quotes with double quotes for keys and values
    text = re.sub(r"([,{\[]\s*)'(\w+)'\s*:", r'\1"\2":', text)
    text = re.sub(r':\s*\'(.*?)\'(,|})', r': "\1"\2', text)

    # Remove trailing commas
    text = re.sub(r',\s*([}\]])', r'\1', text)

    # Convert Python literals to JSON
    text = re.sub(r'\bTrue\b', 'true', text)
    text = re.sub(r'\bFalse\b', 'false', text)
    text = re.sub(r'\bNone\b', 'null', text)

    return text


def _truncate_for_log(text: str, max_length: int = 200) -> str:
    """
    Truncates text for logging purposes to avoid overwhelming logs.
    """
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
