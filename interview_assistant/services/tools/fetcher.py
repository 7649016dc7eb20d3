"""
Document download for resume and job-posting URLs.

Handles Google Drive share links (rewritten to their direct-download form),
shortened / redirecting URLs (resolved manually with HEAD requests) and
private drive documents that answer with a sign-in page instead of the file.
"""
import logging
import re
from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from interview_assistant.core.config import settings
from interview_assistant.core.exceptions import (
    AccessDeniedError,
    InvalidInputError,
    TransientNetworkError,
)

logger = logging.getLogger(__name__)

SHARE_LINK_HOSTS = ("drive.google.com", "docs.google.com")
DIRECT_DOWNLOAD_TEMPLATE = "https://drive.google.com/uc?export=download&id={file_id}"

# Ordered: first match wins
_FILE_ID_PATTERNS = (
    re.compile(r"/file/d/([^/?#&]+)"),
    re.compile(r"/open\?id=([^&#]+)"),
    re.compile(r"[?&]id=([^&#]+)"),
)

SIGN_IN_MARKERS = ("Sign in", "로그인", "ServiceLogin", "accounts.google.com/signin")

_REDIRECT_STATUSES = (301, 302, 303, 307, 308)


def is_share_link(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return host in SHARE_LINK_HOSTS


def extract_file_id(url: str) -> Optional[str]:
    for pattern in _FILE_ID_PATTERNS:
        match = pattern.search(url)
        if match and match.group(1):
            return match.group(1)
    return None


def resolve_share_link(url: str) -> str:
    """
    Rewrite a cloud-drive share link to its direct-download URL.

    Idempotent: a direct-download URL maps to itself. Non-share URLs and share
    links without a recognizable file id are returned unchanged.
    """
    if not is_share_link(url):
        return url
    file_id = extract_file_id(url)
    if not file_id:
        logger.warning(f"No file id found in share link, using it as is: {url}")
        return url
    return DIRECT_DOWNLOAD_TEMPLATE.format(file_id=file_id)


def _require_http_url(url: str) -> None:
    if not url or not url.strip():
        raise InvalidInputError("URL is empty.")
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        raise InvalidInputError(f"Not an absolute HTTP/HTTPS URL: {url}")


class DocumentFetcher:
    """
    Downloads raw document bytes from a user-supplied URL.

    A fresh `httpx.AsyncClient` is opened per fetch; pass `transport` to route
    requests somewhere else (tests use `httpx.MockTransport`).
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = settings.FETCH_TIMEOUT_SECONDS,
        max_redirects: int = settings.MAX_REDIRECTS,
        retry_attempts: int = settings.FETCH_RETRY_ATTEMPTS,
        retry_base_delay: float = settings.RETRY_BASE_DELAY,
        retry_max_delay: float = settings.RETRY_MAX_DELAY,
    ):
        self._transport = transport
        self._timeout = timeout
        self._max_redirects = max_redirects
        self._retry_attempts = max(1, retry_attempts)
        self._retry_base_delay = retry_base_delay
        self._retry_max_delay = retry_max_delay

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)

    async def resolve_url(self, url: str, client: httpx.AsyncClient) -> str:
        """Share-link rewrite, otherwise best-effort redirect resolution."""
        if is_share_link(url):
            return resolve_share_link(url)

        resolved = await self._follow_redirects(url, client)
        if resolved != url:
            logger.info(f"Resolved redirect: {url} -> {resolved}")
        return resolve_share_link(resolved)

    async def _follow_redirects(self, url: str, client: httpx.AsyncClient) -> str:
        current = url
        try:
            for _ in range(self._max_redirects):
                response = await client.head(current, follow_redirects=False)
                location = response.headers.get("location")
                if response.status_code not in _REDIRECT_STATUSES or not location:
                    break
                target = urljoin(current, location)
                if target == current:
                    break
                current = target
        except httpx.HTTPError as e:
            logger.warning(f"Redirect probing failed for {url}, using original URL: {e}")
            return url
        return current

    async def _get(self, url: str, client: httpx.AsyncClient) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=self._retry_base_delay, max=self._retry_max_delay),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        f"Retrying download of {url} "
                        f"(attempt {attempt.retry_state.attempt_number}/{self._retry_attempts})"
                    )
                return await client.get(url, follow_redirects=True)

    async def fetch(self, url: str) -> bytes:
        """
        Download the document behind `url`.

        Raises:
            InvalidInputError: empty or malformed URL, or a 4xx answer
            AccessDeniedError: the document is private / behind a sign-in page
            TransientNetworkError: transport failure or a 5xx answer
        """
        _require_http_url(url)

        async with self._client() as client:
            target = await self.resolve_url(url, client)
            try:
                response = await self._get(target, client)
            except httpx.TransportError as e:
                logger.error(f"Download failed for {target}: {e}")
                raise TransientNetworkError(f"Failed to download {target}: {e}") from e

        self._raise_for_status(response, target)

        content_type = response.headers.get("content-type", "")
        if "text/html" in content_type.lower() and self._is_drive_response(target, response):
            page = response.text
            if any(marker in page for marker in SIGN_IN_MARKERS):
                raise AccessDeniedError(
                    "This document is private or requires sign-in. "
                    "Ask the owner to share it with 'Anyone with the link'."
                )

        logger.info(f"Downloaded {len(response.content)} bytes from {target} ({content_type or 'unknown type'})")
        return response.content

    @staticmethod
    def _is_drive_response(target: str, response: httpx.Response) -> bool:
        # Sign-in markers only count on drive pages
        return is_share_link(target) or is_share_link(str(response.url))

    @staticmethod
    def _raise_for_status(response: httpx.Response, url: str) -> None:
        status = response.status_code
        if status < 400:
            return
        if status in (401, 403):
            raise AccessDeniedError(f"Access denied ({status}) for {url}")
        if status < 500:
            raise InvalidInputError(f"Document not available ({status}) at {url}")
        raise TransientNetworkError(f"Server error ({status}) while downloading {url}")
