"""Prompt for judging whether a blog post's sections overlap."""

STRUCTURE_ANALYSIS_PROMPT = """You are an editorial assistant reviewing a blog post titled "{title}".

The blog has {section_count} sections (numbered from 0):
{section_list}

## Your Task
Identify ONLY genuine structural problems. Most posts need no changes.

## Suggest a MERGE when
- Two sections have almost identical headings
- Two sections clearly discuss the same concept
- One section is obviously an extension of another

## Do NOT suggest a merge when
- Sections are related but cover different aspects
- You are unsure whether they overlap (only suggest it if it is obvious from the headings alone)
- Sections are already well-named and distinct

## Confidence Levels
- "high": the overlap is unmistakable from the headings
- "medium": the overlap is very likely and merging clearly improves flow
- "low": anything else (do not include these)

## Rules
- Each suggestion must reference exactly {section_rule}, using the 0-based numbers above
- Never reference the same pair of sections twice
- Do not try to force the post into a certain number of sections
- If there are no obvious problems, return needsRestructuring: false with an empty suggestions array

## Output
Return ONLY this JSON, with no markdown code fences and no extra text:
{{
  "needsRestructuring": true or false,
  "currentSectionCount": {section_count},
  "restructuringReason": "one sentence explaining your decision",
  "suggestions": [
    {{
      "action": "merge|rewrite|remove|keep",
      "affectedSections": [indexA, indexB],
      "newHeading": "proposed heading, only when merging",
      "rationale": "one sentence: why these sections specifically overlap",
      "confidenceLevel": "high|medium|low"
    }}
  ]
}}"""
