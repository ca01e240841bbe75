"""Turns link checks and structure analysis into approvable proposals."""

import logging
from collections.abc import Sequence

from app.models import (
    LINK_PROPOSAL_ID,
    LinkEvaluation,
    LinkFixProposal,
    Proposal,
    Section,
    StructureAnalysis,
    StructureProposal,
    StructureSuggestion,
    structure_proposal_id,
)
from app.services.structure_policy import StructurePolicy, indices_in_range

logger = logging.getLogger(__name__)

LINK_FIX_RATIONALE = (
    "Broken links harm user experience and SEO. "
    "These links return errors or are unreachable."
)


class ProposalGenerator:
    """Builds the proposal list shown to the reviewer.

    Pure and deterministic: the link-fixes proposal (if any) comes first,
    followed by structure proposals in suggestion order.
    """

    def __init__(self, policy: StructurePolicy | None = None):
        self.policy = policy or StructurePolicy()

    def generate(
        self,
        sections: Sequence[Section],
        link_evaluations: Sequence[LinkEvaluation],
        analysis: StructureAnalysis,
    ) -> list[Proposal]:
        proposals: list[Proposal] = []

        link_proposal = self._link_proposal(link_evaluations)
        if link_proposal:
            proposals.append(link_proposal)

        if analysis.needs_restructuring and analysis.suggestions:
            proposals.extend(self._structure_proposals(sections, analysis.suggestions))

        link_count = 1 if link_proposal else 0
        logger.info(
            f"Generated {len(proposals)} proposals "
            f"({link_count} link, {len(proposals) - link_count} structure)"
        )
        return proposals

    def _link_proposal(self, link_evaluations: Sequence[LinkEvaluation]) -> LinkFixProposal | None:
        broken = [e for e in link_evaluations if not e.working]
        if not broken:
            return None

        noun = "link" if len(broken) == 1 else "links"
        return LinkFixProposal(
            id=LINK_PROPOSAL_ID,
            title="Fix Broken Links",
            description=f"Found {len(broken)} broken or inaccessible {noun} that should be updated or removed.",
            rationale=LINK_FIX_RATIONALE,
            affected_links=broken,
        )

    def _structure_proposals(
        self,
        sections: Sequence[Section],
        suggestions: Sequence[StructureSuggestion],
    ) -> list[StructureProposal]:
        if self._too_aggressive(sections, suggestions):
            return []

        proposals = []
        for i, suggestion in enumerate(suggestions):
            # "keep" is a non-change; never shown to the reviewer
            if suggestion.action == "keep":
                continue
            if not self.policy.allows_cardinality(suggestion) or not indices_in_range(suggestion, len(sections)):
                logger.info(f"Skipping suggestion {i}: invalid sections {suggestion.affected_sections}")
                continue

            title, description = self._describe(sections, suggestion)
            proposals.append(StructureProposal(
                id=structure_proposal_id(i),
                title=title,
                description=description,
                rationale=suggestion.rationale,
                action=suggestion.action,
                affected_sections=list(suggestion.affected_sections),
                new_heading=suggestion.new_heading,
                confidence_level=suggestion.confidence_level,
            ))
        return proposals

    def _too_aggressive(
        self,
        sections: Sequence[Section],
        suggestions: Sequence[StructureSuggestion],
    ) -> bool:
        """Whether merges would touch too much of the post at once."""
        merged = sum(len(s.affected_sections) for s in suggestions if s.action == "merge")
        if merged == 0:
            return False
        if not sections:
            return True

        ratio = merged / len(sections)
        if ratio > self.policy.max_merge_ratio:
            logger.info(
                f"Skipping restructuring: too aggressive "
                f"({round(ratio * 100)}% of sections affected, limit {round(self.policy.max_merge_ratio * 100)}%)"
            )
            return True
        return False

    def _describe(self, sections: Sequence[Section], suggestion: StructureSuggestion) -> tuple[str, str]:
        """Human-readable title and description using real section headings."""
        headings = [self._heading(sections, i) for i in suggestion.affected_sections]
        quoted = ", ".join(f'"{h}"' for h in headings)

        if suggestion.action == "merge":
            title = suggestion.new_heading or f"Merge: {' + '.join(headings)}"
            if len(headings) == 2:
                joined = f'"{headings[0]}" and "{headings[1]}"'
            else:
                joined = quoted
            if suggestion.new_heading:
                description = f'Merge {joined} into a single section: "{suggestion.new_heading}"'
            else:
                description = f"Merge {joined} into a single section"
            return title, description

        verb = suggestion.action.capitalize()
        title = f"{verb}: {' + '.join(headings)}"
        description = f"{verb} section{'s' if len(headings) > 1 else ''} {quoted}"
        if suggestion.new_heading:
            description += f' as "{suggestion.new_heading}"'
        return title, description

    @staticmethod
    def _heading(sections: Sequence[Section], index: int) -> str:
        if 0 <= index < len(sections) and sections[index].heading:
            return sections[index].heading
        return f"Section {index}"
