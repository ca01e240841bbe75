"""Hyperlinks discovered in a blog post and their reachability results."""

from typing import Literal

from pydantic import ConfigDict

from app.models.base import CamelModel

ProbeMethod = Literal["HEAD", "GET", "HEAD-SPECIAL", "GET-SPECIAL"]


class Link(CamelModel):
    """An absolute hyperlink found in the source HTML."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    url: str
    text: str = ""
    context: str = ""  # Excerpt of the surrounding text


class LinkEvaluation(Link):
    """Reachability verdict for a single link."""

    status: int = 0  # HTTP status, or 0 when no response was received
    working: bool = False
    issue: str | None = None
    method: ProbeMethod | None = None  # Probe strategy that resolved the link
