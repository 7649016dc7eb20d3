from typing import Any, Optional
import logging
import json
import re

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^\s*```[a-zA-Z]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```\s*$")


def strip_code_fence(raw_text: str) -> str:
    """Remove a leading ```json / ``` opener and/or a trailing ``` closer."""
    if not raw_text:
        return ""
    text = _FENCE_OPEN.sub("", raw_text, count=1)
    text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def extract_json_object(text: str) -> Optional[str]:
    """Outermost {...} substring, for output wrapped in prose."""
    start_idx = text.find('{')
    end_idx = text.rfind('}')
    if start_idx != -1 and end_idx > start_idx:
        return text[start_idx:end_idx + 1]
    return None


def load_json_object(raw_text: str) -> Any:
    """
    Decode an LLM reply into a JSON value.

    Tries the fence-stripped text first, then the outermost {...} substring.

    Raises:
        json.JSONDecodeError: when neither candidate is valid JSON.
    """
    text = strip_code_fence(raw_text)
    try:
        return json.loads(text)
    except json.JSONDecodeError as first_error:
        extracted = extract_json_object(text)
        if extracted is None or extracted == text:
            raise
        logger.debug("Direct JSON decode failed, retrying with the outermost object")
        try:
            return json.loads(extracted)
        except json.JSONDecodeError:
            raise first_error


def parse_llm_response(raw_text: str, schema_class: type) -> Any:
    """
    Parse LLM response and validate against schema.

    Raises:
        json.JSONDecodeError: the reply is not JSON
        pydantic.ValidationError: the JSON does not fit `schema_class`
    """
    data = load_json_object(raw_text)
    return schema_class.model_validate(data)


def content_to_text(content: Any) -> str:
    """Flatten LangChain message content (str or list of content blocks) to text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)
