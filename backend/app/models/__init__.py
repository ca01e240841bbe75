"""Domain models for the blog refresh pipeline."""

from app.models.link import Link, LinkEvaluation, ProbeMethod
from app.models.proposal import (
    LINK_PROPOSAL_ID,
    LinkFixProposal,
    Proposal,
    StructureProposal,
    structure_proposal_id,
)
from app.models.section import Section
from app.models.structure import StructureAnalysis, StructureSuggestion

__all__ = [
    "Link",
    "LinkEvaluation",
    "ProbeMethod",
    "Section",
    "StructureSuggestion",
    "StructureAnalysis",
    "Proposal",
    "LinkFixProposal",
    "StructureProposal",
    "LINK_PROPOSAL_ID",
    "structure_proposal_id",
]
