"""LLM prompts for various tasks."""

from app.prompts.apply_changes import APPLY_CHANGES_PROMPT
from app.prompts.structure_analysis import STRUCTURE_ANALYSIS_PROMPT

__all__ = [
    "APPLY_CHANGES_PROMPT",
    "STRUCTURE_ANALYSIS_PROMPT",
]
