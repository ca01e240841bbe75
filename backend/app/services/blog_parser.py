"""Splits blog HTML into sections and collects outbound links."""

from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from app.models import Link, Section

CONTEXT_LENGTH = 100


@dataclass
class ParsedBlog:
    """Sections and absolute links found in a post."""
    sections: list[Section] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)


class BlogParser:
    """Extract h2-delimited sections and absolute links from blog HTML."""

    SECTION_TAG = "h2"

    def parse(self, html: str) -> ParsedBlog:
        soup = BeautifulSoup(html or "", "html.parser")
        return ParsedBlog(
            sections=self.extract_sections(soup),
            links=self.extract_links(soup),
        )

    def extract_sections(self, soup: BeautifulSoup) -> list[Section]:
        """One section per h2, holding sibling markup up to the next h2."""
        sections = []
        for i, heading in enumerate(soup.find_all(self.SECTION_TAG)):
            parts = []
            for sibling in heading.next_siblings:
                if not isinstance(sibling, Tag):
                    continue  # Text between elements is not section content
                if sibling.name == self.SECTION_TAG:
                    break
                parts.append(str(sibling))

            sections.append(Section(
                id=f"section-{i}",
                heading=heading.get_text().strip(),
                content="".join(parts),
                original_index=i,
            ))
        return sections

    def extract_links(self, soup: BeautifulSoup) -> list[Link]:
        """Anchors with absolute http(s) targets; relative and fragment links are skipped."""
        links = []
        for i, anchor in enumerate(soup.find_all("a", href=True)):
            href = anchor["href"].strip()
            if not href.startswith("http"):
                continue

            parent = anchor.parent
            context = parent.get_text() if parent is not None else anchor.get_text()
            links.append(Link(
                id=f"link-{i}",
                url=href,
                text=anchor.get_text().strip(),
                context=" ".join(context.split())[:CONTEXT_LENGTH],
            ))
        return links
