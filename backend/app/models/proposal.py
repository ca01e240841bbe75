"""User-facing, approvable change proposals."""

from typing import Annotated, Literal, Union

from pydantic import Field

from app.models.base import CamelModel
from app.models.link import LinkEvaluation
from app.models.structure import ConfidenceLevel, SuggestionAction

LINK_PROPOSAL_ID = "proposal-links"


def structure_proposal_id(index: int) -> str:
    """Stable id for the structure proposal built from suggestion ``index``."""
    return f"proposal-structure-{index}"


class ProposalBase(CamelModel):
    """Fields shared by every proposal type.

    ``approved`` is toggled by the reviewing user; nothing else changes
    after the proposal is generated.
    """

    id: str = ""
    title: str = ""
    description: str = ""
    rationale: str = ""
    approved: bool = False


class LinkFixProposal(ProposalBase):
    """Aggregated fix for every broken link in the post."""

    type: Literal["link-fixes"] = "link-fixes"
    affected_links: list[LinkEvaluation] = Field(default_factory=list)


class StructureProposal(ProposalBase):
    """One structural edit backed by a validated suggestion."""

    type: Literal["structure"] = "structure"
    action: SuggestionAction
    affected_sections: list[int] = Field(default_factory=list)
    new_heading: str | None = None
    confidence_level: ConfidenceLevel | None = None


Proposal = Annotated[
    Union[LinkFixProposal, StructureProposal],
    Field(discriminator="type"),
]
