"""
Heuristic input filter for chat messages and document URLs.

A denylist, not a security boundary: it catches the common prompt-injection
phrasings and markup/script payloads before they reach the interview agent.
"""
import logging
import re
from typing import Optional, Tuple
from urllib.parse import urlparse

from interview_assistant.core.config import settings

logger = logging.getLogger(__name__)

BLOCKED_KEYWORDS = (
    "system.prompt",
    "ignore previous",
    "ignore above",
    "forget",
    "new persona",
    "you are now",
    "you're now",
    "act as",
    "ignore instructions",
    "assistant terminated",
    "system command",
    "overwrite instructions",
)

# Markdown stays allowed; angle brackets, script-capable URI schemes and escape sequences do not
DANGEROUS_PATTERN = re.compile(
    r"[<>]|javascript:|data:|file:|vbscript:|\\x[0-9a-fA-F]{2}|\\u[0-9a-fA-F]{4}",
    re.IGNORECASE,
)

DANGEROUS_PROTOCOLS = ("javascript:", "data:", "vbscript:", "file:")

ValidationResult = Tuple[bool, Optional[str]]


def validate_message(message: str, max_length: int = settings.MAX_MESSAGE_LENGTH) -> ValidationResult:
    """
    Check a chat message before it is sent to the interview agent.

    Returns:
        (True, None) when accepted, otherwise (False, reason).
    """
    if message is None:
        return False, "Message is empty."

    if len(message) > max_length:
        return False, f"Message is too long (max {max_length} characters)."

    lowered = message.lower()
    for keyword in BLOCKED_KEYWORDS:
        if keyword in lowered:
            logger.warning(f"Blocked message containing denylisted phrase '{keyword}'")
            return False, "Message contains a keyword that is not allowed."

    if DANGEROUS_PATTERN.search(message):
        logger.warning("Blocked message containing disallowed characters")
        return False, "Message contains characters that are not allowed."

    return True, None


def validate_url(url: str, max_length: int = settings.MAX_URL_LENGTH) -> ValidationResult:
    """
    Check a user-supplied document URL.

    Returns:
        (True, None) when accepted, otherwise (False, reason).
    """
    if not url or not url.strip():
        return False, "URL is empty."

    if len(url) > max_length:
        return False, f"URL is too long (max {max_length} characters)."

    if url.lower().startswith(DANGEROUS_PROTOCOLS):
        return False, "URL protocol is not allowed."

    try:
        parsed = urlparse(url)
    except ValueError:
        return False, "URL is not a valid HTTP/HTTPS address."

    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        return False, "URL is not a valid HTTP/HTTPS address."

    return True, None


def sanitize_message(message: str, max_length: int = settings.MAX_MESSAGE_LENGTH) -> str:
    """Escape angle brackets and cap the length. Secondary defense next to validation."""
    if not message or not message.strip():
        return ""

    message = message.replace("<", "&lt;").replace(">", "&gt;")

    if len(message) > max_length:
        message = message[:max_length]

    return message.strip()
