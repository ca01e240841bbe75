"""Guardrails shared by structure analysis and proposal generation."""

from dataclasses import dataclass

from app.config import Settings
from app.models import StructureSuggestion


@dataclass(frozen=True)
class StructurePolicy:
    """How strictly AI structure suggestions are filtered.

    Attributes:
        strict_pairs: Every suggestion must name exactly two sections.
        max_merge_sections: Upper bound on sections per suggestion when
            ``strict_pairs`` is off. Merges still need at least two.
        require_confidence: Keep only high/medium confidence suggestions;
            unlabeled ones are dropped.
        max_merge_ratio: Largest share of the post that merge suggestions
            may touch before all structure proposals are abandoned.
    """
    strict_pairs: bool = True
    max_merge_sections: int = 3
    require_confidence: bool = True
    max_merge_ratio: float = 0.7

    @classmethod
    def from_settings(cls, settings: Settings) -> "StructurePolicy":
        return cls(
            strict_pairs=settings.structure_strict_pairs,
            max_merge_sections=settings.structure_max_merge_sections,
            require_confidence=settings.structure_require_confidence,
            max_merge_ratio=settings.structure_max_merge_ratio,
        )

    def allows_cardinality(self, suggestion: StructureSuggestion) -> bool:
        """Whether the suggestion names an acceptable number of sections."""
        count = len(suggestion.affected_sections)
        # A repeated index names fewer sections than it lists
        if len(set(suggestion.affected_sections)) != count:
            return False
        if self.strict_pairs:
            return count == 2
        minimum = 2 if suggestion.action == "merge" else 1
        return minimum <= count <= self.max_merge_sections

    def allows_confidence(self, suggestion: StructureSuggestion) -> bool:
        if not self.require_confidence:
            return True
        return suggestion.confidence_level in ("high", "medium")


def indices_in_range(suggestion: StructureSuggestion, section_count: int) -> bool:
    """True when every referenced section exists; indices are never clamped."""
    return all(0 <= i < section_count for i in suggestion.affected_sections)
