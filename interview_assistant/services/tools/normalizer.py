"""Turns fetched documents into prompt-ready text."""
import logging
from typing import Optional

from interview_assistant.core.exceptions import ConversionError, UnsupportedEncodingError

logger = logging.getLogger(__name__)

CONVERT_TOOL_NAME = "convert_to_markdown"

# Tried in order; cp1252 is the legacy Western single-byte fallback
TEXT_ENCODINGS = ("utf-8-sig", "cp1252")


def normalize(raw_bytes: bytes, source_url: str = "") -> str:
    """
    Decode downloaded bytes as text.

    Raises:
        UnsupportedEncodingError: if none of TEXT_ENCODINGS can decode the bytes.
    """
    for encoding in TEXT_ENCODINGS:
        try:
            return raw_bytes.decode(encoding)
        except UnicodeDecodeError:
            logger.debug(f"Decoding {source_url or 'document'} as {encoding} failed")
    raise UnsupportedEncodingError(
        f"Could not decode {source_url or 'document'} as text "
        f"(tried {', '.join(TEXT_ENCODINGS)})."
    )


class ContentNormalizer:
    """
    Converts resume / job-posting URLs to markdown through the tool registry.

    The conversion tool is looked up by name at call time; a missing tool is a
    configuration error, not a soft failure.
    """

    def __init__(self, registry, tool_name: str = CONVERT_TOOL_NAME):
        self.registry = registry
        self.tool_name = tool_name

    async def convert(self, url: str) -> str:
        tool = self.registry.get(self.tool_name)
        if tool is None:
            raise ConversionError(
                f"Document conversion tool '{self.tool_name}' is not registered.",
                details={"available_tools": self.registry.names()},
            )

        logger.info(f"Converting {url} with '{self.tool_name}'")
        result: Optional[str] = await tool.ainvoke({"uri": url})
        text = (result or "").strip()
        if not text:
            raise ConversionError(f"Conversion of {url} returned no text.")

        logger.info(f"Converted {url} into {len(text)} characters")
        return text

    @staticmethod
    def decode(raw_bytes: bytes, source_url: str = "") -> str:
        return normalize(raw_bytes, source_url)
