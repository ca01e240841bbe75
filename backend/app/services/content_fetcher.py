"""Fetches a blog post and extracts its title and main content."""

import logging
from dataclasses import dataclass

import httpx
from bs4 import BeautifulSoup

from app.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class FetchedBlog:
    """Title and main-content HTML of a fetched post."""
    title: str
    content: str
    url: str


class ContentFetcher:
    """Download a post and pull out the part worth analyzing."""

    # Tried in order; first non-empty match wins
    CONTENT_SELECTORS = [
        "article",
        "main",
        ".post-content",
        ".entry-content",
        "body",
    ]

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self.client = client
        self.timeout = settings.fetch_timeout_seconds
        self.user_agent = settings.user_agent

    async def fetch(self, url: str) -> FetchedBlog:
        """Fetch ``url`` and extract title and content.

        Raises:
            httpx.HTTPError: If the site is unreachable or returns an error status
        """
        logger.info(f"Fetching blog content from {url}")
        response = await self.client.get(
            url,
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
        )
        response.raise_for_status()

        title, content = self.extract(response.text)
        return FetchedBlog(title=title, content=content, url=url)

    def extract(self, html: str) -> tuple[str, str]:
        """Return ``(title, content_html)`` from a full page."""
        soup = BeautifulSoup(html, "html.parser")
        return self._extract_title(soup), self._extract_content(soup)

    def _extract_content(self, soup: BeautifulSoup) -> str:
        for selector in self.CONTENT_SELECTORS:
            element = soup.select_one(selector)
            if element is None:
                continue
            inner = element.decode_contents()
            if inner.strip():
                return inner
        # Fragments without a body still carry content
        return soup.decode_contents()

    def _extract_title(self, soup: BeautifulSoup) -> str:
        h1 = soup.find("h1")
        if h1 and h1.get_text().strip():
            return h1.get_text().strip()

        title_tag = soup.find("title")
        if title_tag and title_tag.get_text().strip():
            return title_tag.get_text().strip()

        return "Untitled"
