"""Heading-delimited blocks of a blog post."""

from pydantic import ConfigDict

from app.models.base import CamelModel


class Section(CamelModel):
    """One h2-delimited block of the post.

    ``original_index`` is the stable identity later stages use to refer
    back to a section, even after merges conceptually remove some.
    """

    model_config = ConfigDict(frozen=True)

    id: str = ""
    heading: str
    content: str = ""
    original_index: int = 0
