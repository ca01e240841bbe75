"""LLM-backed detection of overlapping blog sections."""

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from app.models import Section, StructureAnalysis, StructureSuggestion
from app.prompts import STRUCTURE_ANALYSIS_PROMPT
from app.services.llm_client import TextGenerator
from app.services.response_decoder import Unparseable, decode_json_reply
from app.services.structure_policy import StructurePolicy, indices_in_range

logger = logging.getLogger(__name__)

UNPARSEABLE_REASON = "Unable to parse AI response"
UNAVAILABLE_REASON = "Structure analysis unavailable"
NO_SECTIONS_REASON = "No sections found to analyze"
DEFAULT_REASON = "No structural issues detected"


def safe_default(section_count: int, reason: str = DEFAULT_REASON) -> StructureAnalysis:
    """Analysis that proposes nothing.

    Used whenever the model's answer cannot be trusted, so a failed
    analysis never yields destructive suggestions.
    """
    return StructureAnalysis(
        needs_restructuring=False,
        current_section_count=section_count,
        restructuring_reason=reason,
        suggestions=[],
    )


class StructureAnalyzer:
    """Asks the LLM which sections overlap and sanitizes its answer.

    Transport errors are logged and replaced by the safe default, so a
    flaky model never fails the surrounding analysis.
    """

    def __init__(self, llm: TextGenerator, policy: StructurePolicy | None = None):
        self.llm = llm
        self.policy = policy or StructurePolicy()

    def build_prompt(self, sections: Sequence[Section], title: str) -> str:
        section_list = "\n".join(f'{i}. "{s.heading}"' for i, s in enumerate(sections))
        if self.policy.strict_pairs:
            section_rule = "2 sections (never 1, never 3 or more)"
        else:
            section_rule = f"between 2 and {self.policy.max_merge_sections} sections for merges"
        return STRUCTURE_ANALYSIS_PROMPT.format(
            title=title or "Untitled",
            section_count=len(sections),
            section_list=section_list,
            section_rule=section_rule,
        )

    async def analyze(self, sections: Sequence[Section], title: str) -> StructureAnalysis:
        section_count = len(sections)
        if section_count == 0:
            return safe_default(0, NO_SECTIONS_REASON)

        prompt = self.build_prompt(sections, title)
        try:
            response = await self.llm.complete(prompt)
        except Exception as e:
            logger.warning(f"Structure analysis failed: {e}. Returning safe default.")
            return safe_default(section_count, UNAVAILABLE_REASON)

        decoded = decode_json_reply(response)
        if isinstance(decoded, Unparseable):
            logger.warning(f"Could not decode structure analysis ({decoded.reason})")
            return safe_default(section_count, UNPARSEABLE_REASON)
        if not isinstance(decoded.value, dict):
            logger.warning("Structure analysis reply was not a JSON object")
            return safe_default(section_count, UNPARSEABLE_REASON)

        return self.sanitize(decoded.value, section_count)

    def sanitize(self, data: dict[str, Any], section_count: int) -> StructureAnalysis:
        """Validate a decoded model reply into a trustworthy analysis.

        Steps run in a fixed order: coerce, cardinality, index bounds,
        duplicate section sets, confidence. ``needs_restructuring`` is
        recomputed from what survives.
        """
        raw_suggestions = data.get("suggestions")
        if not isinstance(raw_suggestions, list):
            raw_suggestions = []

        suggestions = []
        for raw in raw_suggestions:
            try:
                suggestions.append(StructureSuggestion.model_validate(raw))
            except ValidationError:
                logger.info(f"Removed malformed suggestion: {raw!r}")

        kept = []
        for s in suggestions:
            if self.policy.allows_cardinality(s):
                kept.append(s)
            else:
                logger.info(f"Removed suggestion with {len(s.affected_sections)} sections: {s.affected_sections}")
        suggestions = kept

        kept = []
        for s in suggestions:
            if indices_in_range(s, section_count):
                kept.append(s)
            else:
                logger.info(f"Removed out-of-range suggestion: {s.affected_sections}")
        suggestions = kept

        seen: set[frozenset[int]] = set()
        kept = []
        for s in suggestions:
            key = s.section_key()
            if key in seen:
                logger.info(f"Removed duplicate suggestion for sections {sorted(key)}")
                continue
            seen.add(key)
            kept.append(s)
        suggestions = kept

        kept = []
        for s in suggestions:
            if self.policy.allows_confidence(s):
                kept.append(s)
            else:
                logger.info(f"Removed {s.confidence_level or 'unlabeled'} confidence suggestion: {s.affected_sections}")
        suggestions = kept

        reason = data.get("restructuringReason")
        if not isinstance(reason, str) or not reason.strip():
            reason = DEFAULT_REASON

        analysis = StructureAnalysis(
            needs_restructuring=len(suggestions) > 0,
            current_section_count=section_count,
            restructuring_reason=reason,
            suggestions=suggestions,
        )
        logger.info(f"Structure analysis: {len(suggestions)} suggestion(s) kept of {len(raw_suggestions)}")
        return analysis
