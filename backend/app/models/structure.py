"""Structural suggestions returned by the LLM and the validated analysis."""

from typing import Literal

from pydantic import Field, field_validator

from app.models.base import CamelModel

SuggestionAction = Literal["merge", "rewrite", "remove", "keep"]
ConfidenceLevel = Literal["high", "medium", "low"]


class StructureSuggestion(CamelModel):
    """A single structural change proposed by the model.

    ``action``, ``affected_sections`` and ``rationale`` are required;
    the rest depends on which prompt produced the reply.
    """

    action: SuggestionAction
    affected_sections: list[int]
    rationale: str
    new_heading: str | None = None
    confidence_level: ConfidenceLevel | None = None

    @field_validator("action", "confidence_level", mode="before")
    @classmethod
    def _lowercase(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def section_key(self) -> frozenset[int]:
        """Unordered identity of the sections this suggestion touches."""
        return frozenset(self.affected_sections)


class StructureAnalysis(CamelModel):
    """Validated result of a structure analysis run."""

    needs_restructuring: bool = False
    current_section_count: int = 0
    restructuring_reason: str = ""
    suggestions: list[StructureSuggestion] = Field(default_factory=list)
