"""Read ChordPro text from a file, stdin, or a URL.

Remote sources are fetched with httpx.  Plain-text responses (``.cho`` files
served raw) are returned as-is; HTML pages have their ChordPro text pulled
from the first ``<pre>`` block, falling back to the page's visible text.
"""

import logging
import sys
from pathlib import Path

import httpx
from bs4 import BeautifulSoup

from .exceptions import FetchError, ParseError

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 15


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def load_source(location: str, timeout: float = FETCH_TIMEOUT) -> str:
    """Return the ChordPro text at *location*.

    *location* is a URL, a file path, or ``-`` for stdin.

    Raises FetchError on HTTP-level failures and ParseError when a fetched
    page holds no text.  File errors propagate as ``OSError``.
    """
    if location == "-":
        return sys.stdin.read()
    if is_url(location):
        return fetch_source(location, timeout=timeout)
    return Path(location).read_text(encoding="utf-8")


def fetch_source(url: str, timeout: float = FETCH_TIMEOUT) -> str:
    logger.debug("Fetching %s", url)
    try:
        resp = httpx.get(url, follow_redirects=True, timeout=timeout)
    except httpx.RequestError as exc:
        raise FetchError(url, 0) from exc
    if resp.status_code != 200:
        raise FetchError(url, resp.status_code)

    if "html" not in resp.headers.get("content-type", ""):
        return resp.text
    return extract_chordpro(resp.text, url)


def extract_chordpro(html: str, url: str) -> str:
    """Pull ChordPro text out of an HTML page.

    Raises ParseError if the page has no text at all.
    """
    soup = BeautifulSoup(html, "html.parser")

    pre = soup.find("pre")
    if pre is not None:
        text = pre.get_text()
    else:
        body = soup.body or soup
        text = body.get_text("\n")

    if not text.strip():
        raise ParseError(url, "Page contains no ChordPro text")
    return text
