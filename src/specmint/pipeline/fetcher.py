"""Retrieval of documentation text from URLs and local files."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import httpx

logger = logging.getLogger(__name__)

HTML_SUFFIXES = (".html", ".htm")

_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")


class FetchError(Exception):
    """Raised when a documentation source cannot be retrieved."""

    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f"Failed to fetch {location}: {reason}")


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def html_to_text(html: str) -> str:
    """Reduce an HTML page to its visible text."""
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    return _SPACE_RE.sub(" ", text).strip()


class DocumentFetcher:
    """Fetches documentation as plain text.

    URLs are retrieved with httpx; anything else is treated as a local
    file path. HTML is reduced to text, other content is returned as-is.
    """

    def __init__(self, timeout: float = 30.0, client: httpx.Client | None = None) -> None:
        self.timeout = timeout
        self._client = client

    def fetch(self, location: str) -> str:
        if is_url(location):
            return self._fetch_url(location)
        return self._read_file(Path(location))

    def _fetch_url(self, url: str) -> str:
        logger.debug("Fetching %s", url)
        try:
            if self._client is not None:
                response = self._client.get(url, follow_redirects=True)
            else:
                response = httpx.get(url, timeout=self.timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchError(url, str(e) or type(e).__name__) from e

        content_type = response.headers.get("content-type", "")
        if "html" in content_type:
            return html_to_text(response.text)
        return response.text

    def _read_file(self, path: Path) -> str:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise FetchError(str(path), e.strerror or str(e)) from e
        if path.suffix.lower() in HTML_SUFFIXES:
            return html_to_text(text)
        return text
