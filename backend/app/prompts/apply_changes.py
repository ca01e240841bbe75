"""Prompt for rewriting a blog post with approved structural changes."""

APPLY_CHANGES_PROMPT = """You are refreshing a blog post by applying approved structural changes.

## Full Original Content
{content}

## Original Sections
{section_list}

## Approved Changes To Apply
{changes}

## Rules
1. Apply ONLY the approved changes listed above; do not change anything else
2. Keep ALL original text, examples, data and details; do not remove or summarise content
3. Preserve the original tone and writing style exactly
4. For each approved merge, combine the listed sections under the new heading
5. All other sections stay exactly as they are, including their links and markup
6. Do NOT introduce new content or opinions
7. Return ONLY clean HTML for the whole post: no markdown, no code fences, no commentary

Output the full refreshed HTML content now:"""
