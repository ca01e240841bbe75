"""Applies reviewer-approved proposals to a blog post."""

import logging
from collections.abc import Sequence

from bs4 import BeautifulSoup

from app.models import LinkFixProposal, Proposal, Section, StructureProposal
from app.prompts import APPLY_CHANGES_PROMPT
from app.services.llm_client import TextGenerator
from app.services.response_decoder import strip_code_fence

logger = logging.getLogger(__name__)

BROKEN_LINK_CLASS = "broken-link-removed"


class ChangeApplier:
    """Edits links in place and delegates structural rewrites to the LLM.

    When both kinds of change are approved, the link-fixed document is what
    the model rewrites, so link fixes survive the structural pass.
    Parse and LLM errors propagate unchanged.
    """

    def __init__(self, llm: TextGenerator):
        self.llm = llm

    async def apply(
        self,
        original_content: str,
        approved_proposals: Sequence[Proposal],
        original_sections: Sequence[Section],
    ) -> str:
        soup = BeautifulSoup(original_content, "html.parser")

        link_proposal = next((p for p in approved_proposals if isinstance(p, LinkFixProposal)), None)
        if link_proposal:
            replaced = self._remove_broken_links(soup, link_proposal)
            logger.info(f"Removed {replaced} broken link(s)")

        structure_proposals = [p for p in approved_proposals if isinstance(p, StructureProposal)]
        if not structure_proposals:
            return str(soup)

        prompt = self.build_prompt(str(soup), structure_proposals, original_sections)
        logger.info(f"Applying {len(structure_proposals)} structural change(s) with full content")
        response = await self.llm.complete(prompt)
        return strip_code_fence(response)

    def _remove_broken_links(self, soup: BeautifulSoup, proposal: LinkFixProposal) -> int:
        """Point every anchor for an affected URL at ``#`` and mark it."""
        replaced = 0
        for link in proposal.affected_links:
            # Links are recorded with their href stripped
            matches = soup.find_all("a", href=lambda href, url=link.url: href is not None and href.strip() == url)
            for anchor in matches:
                anchor["href"] = "#"
                classes = anchor.get("class") or []
                if BROKEN_LINK_CLASS not in classes:
                    anchor["class"] = [*classes, BROKEN_LINK_CLASS]
                replaced += 1
        return replaced

    def build_prompt(
        self,
        content: str,
        proposals: Sequence[StructureProposal],
        sections: Sequence[Section],
    ) -> str:
        """Prompt carrying the whole document, never an excerpt."""
        section_list = "\n".join(f'Section {i}: "{s.heading}"' for i, s in enumerate(sections))
        changes = "\n\n".join(
            self._format_change(n, proposal, sections)
            for n, proposal in enumerate(proposals, 1)
        )
        return APPLY_CHANGES_PROMPT.format(
            content=content,
            section_list=section_list or "(no sections)",
            changes=changes,
        )

    def _format_change(self, number: int, proposal: StructureProposal, sections: Sequence[Section]) -> str:
        affected = ", ".join(
            f'section {i} ("{sections[i].heading}")' if 0 <= i < len(sections) else f"section {i}"
            for i in proposal.affected_sections
        )
        lines = [
            f"Change {number}: {proposal.action}",
            f"  - Affected: {affected}",
        ]
        if proposal.description:
            lines.append(f"  - Description: {proposal.description}")
        if proposal.new_heading:
            lines.append(f'  - New heading: "{proposal.new_heading}"')
        lines.append(f"  - Why: {proposal.rationale}")
        return "\n".join(lines)
