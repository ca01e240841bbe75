"""Business logic services."""

from app.services.change_applier import ChangeApplier
from app.services.link_evaluator import LinkEvaluator
from app.services.proposal_generator import ProposalGenerator
from app.services.structure_analyzer import StructureAnalyzer
from app.services.structure_policy import StructurePolicy

__all__ = [
    "ChangeApplier",
    "LinkEvaluator",
    "ProposalGenerator",
    "StructureAnalyzer",
    "StructurePolicy",
]
