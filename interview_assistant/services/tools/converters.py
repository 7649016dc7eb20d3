"""
Tools available to the interview pipeline and the interview agent.

The registry exposes LangChain tools by name. The default registry holds
`convert_to_markdown`, which downloads a URI and turns PDF, HTML or plain
text into markdown-ish text suitable for prompting.
"""
import asyncio
import io
import logging
import re
from typing import Dict, Iterable, List, Optional

import pypdf
from pypdf.errors import PdfReadError
from bs4 import BeautifulSoup
from langchain_core.tools import BaseTool, StructuredTool

from interview_assistant.core.exceptions import ConversionError
from interview_assistant.services.tools.fetcher import DocumentFetcher
from interview_assistant.services.tools.normalizer import CONVERT_TOOL_NAME, normalize

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF"
_HTML_SNIFF = re.compile(rb"^\s*(<!doctype html|<html|<head|<body)", re.IGNORECASE)
_BLANK_LINES = re.compile(r"\n{3,}")


class ToolRegistry:
    """Name-addressable collection of LangChain tools."""

    def __init__(self, tools: Iterable[BaseTool] = ()):
        self._tools: Dict[str, BaseTool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: BaseTool) -> None:
        if tool.name in self._tools:
            logger.warning(f"Replacing registered tool '{tool.name}'")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[BaseTool]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    @property
    def tools(self) -> List[BaseTool]:
        return list(self._tools.values())

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


# --- Converters ---

def pdf_to_text(data: bytes) -> str:
    """Extract the text of every page with pypdf."""
    try:
        reader = pypdf.PdfReader(io.BytesIO(data))
        text_parts = [page.extract_text() or "" for page in reader.pages]
    except PdfReadError as e:
        raise ConversionError(f"Could not read PDF: {e}") from e
    text = "\n\n".join(part.strip() for part in text_parts if part.strip())
    logger.info(f"Extracted {len(text)} characters from {len(reader.pages)} PDF pages")
    return text


def html_to_markdown(html: str) -> str:
    """Reduce an HTML page to headings, list items and paragraphs."""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(["script", "style", "noscript", "nav", "footer", "header", "form"]):
        element.decompose()

    root = soup.body or soup
    blocks = []
    for element in root.find_all(["h1", "h2", "h3", "h4", "h5", "h6", "li", "p", "pre", "td"]):
        # Nested blocks are emitted by their innermost block element
        if element.find(["p", "li", "pre"]):
            continue
        text = element.get_text(" ", strip=True)
        if not text:
            continue
        if element.name.startswith("h"):
            blocks.append(f"{'#' * int(element.name[1])} {text}")
        elif element.name == "li":
            blocks.append(f"- {text}")
        else:
            blocks.append(text)

    if not blocks:
        # Pages built from bare divs
        return _BLANK_LINES.sub("\n\n", root.get_text("\n", strip=True))

    return _BLANK_LINES.sub("\n\n", "\n\n".join(blocks))


def convert_bytes_to_markdown(data: bytes, source_url: str = "") -> str:
    """Pick a converter by sniffing the payload."""
    if data.startswith(PDF_SIGNATURE):
        return pdf_to_text(data)
    if _HTML_SNIFF.match(data[:512]):
        return html_to_markdown(normalize(data, source_url))
    return normalize(data, source_url).strip()


def build_convert_to_markdown_tool(fetcher: DocumentFetcher) -> BaseTool:
    """Create the `convert_to_markdown` tool bound to a fetcher."""

    async def convert_to_markdown(uri: str) -> str:
        """Download the document at `uri` (PDF, HTML or text) and return its content as markdown."""
        data = await fetcher.fetch(uri)
        if not data:
            raise ConversionError(f"The document at {uri} is empty.")
        # pypdf and BeautifulSoup are synchronous
        return await asyncio.to_thread(convert_bytes_to_markdown, data, uri)

    return StructuredTool.from_function(
        coroutine=convert_to_markdown,
        name=CONVERT_TOOL_NAME,
        description=(
            "Download a document (resume, job posting, web page, PDF) from a http(s) URI "
            "and return its text content as markdown."
        ),
    )


def build_default_registry(fetcher: Optional[DocumentFetcher] = None) -> ToolRegistry:
    return ToolRegistry([build_convert_to_markdown_tool(fetcher or DocumentFetcher())])
