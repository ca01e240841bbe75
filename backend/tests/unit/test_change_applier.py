"""Unit tests for applying approved proposals."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from app.models import LinkEvaluation, LinkFixProposal, StructureProposal
from app.services.change_applier import BROKEN_LINK_CLASS, ChangeApplier

BROKEN_URL = "https://broken.example.com/page"

CONTENT = (
    "<h2>Introduction</h2><p>Start <a href=\"https://broken.example.com/page\">here</a></p>"
    "<h2>Main Topic</h2><p>Keep <a href=\"https://ok.example.com\">this</a></p>"
    "<h2>Conclusion</h2><p>The end</p>"
)


def _link_proposal(*urls: str) -> LinkFixProposal:
    return LinkFixProposal(
        id="proposal-links",
        title="Fix Broken Links",
        affected_links=[
            LinkEvaluation(id=f"link-{i}", url=url, status=404, working=False, issue="Page not found")
            for i, url in enumerate(urls)
        ],
        approved=True,
    )


def _merge_proposal() -> StructureProposal:
    return StructureProposal(
        id="proposal-structure-0",
        title="Getting Started",
        description='Merge "Introduction" and "Main Topic" into a single section: "Getting Started"',
        rationale="Both introduce the topic",
        action="merge",
        affected_sections=[0, 1],
        new_heading="Getting Started",
        approved=True,
    )


@pytest.mark.asyncio
async def test_link_fixes_alone_never_call_the_model(make_llm, three_sections) -> None:
    llm = make_llm("should not be used")

    result = await ChangeApplier(llm).apply(CONTENT, [_link_proposal(BROKEN_URL)], three_sections)

    assert llm.prompts == []
    soup = BeautifulSoup(result, "html.parser")
    fixed = soup.find("a", string="here")
    assert fixed["href"] == "#"
    assert BROKEN_LINK_CLASS in fixed["class"]
    assert BROKEN_URL not in result
    assert soup.find("a", string="this")["href"] == "https://ok.example.com"
    assert [h.get_text() for h in soup.find_all("h2")] == ["Introduction", "Main Topic", "Conclusion"]


@pytest.mark.asyncio
async def test_every_anchor_for_a_broken_url_is_fixed(make_llm, three_sections) -> None:
    content = f'<p><a href="{BROKEN_URL}">one</a> and <a href="{BROKEN_URL}">two</a></p>'

    result = await ChangeApplier(make_llm()).apply(content, [_link_proposal(BROKEN_URL)], three_sections)

    anchors = BeautifulSoup(result, "html.parser").find_all("a")
    assert [a["href"] for a in anchors] == ["#", "#"]


@pytest.mark.asyncio
async def test_existing_classes_are_preserved(make_llm, three_sections) -> None:
    content = f'<p><a class="external" href="{BROKEN_URL}">docs</a></p>'

    result = await ChangeApplier(make_llm()).apply(content, [_link_proposal(BROKEN_URL)], three_sections)

    anchor = BeautifulSoup(result, "html.parser").find("a")
    assert anchor["class"] == ["external", BROKEN_LINK_CLASS]


@pytest.mark.asyncio
async def test_no_approved_proposals_returns_content_unchanged(make_llm, three_sections) -> None:
    llm = make_llm()
    content = "<h2>Intro</h2><p>Hello</p>"

    result = await ChangeApplier(llm).apply(content, [], three_sections)

    assert result == content
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_structural_change_returns_unfenced_model_output(make_llm, three_sections) -> None:
    llm = make_llm("```html\n<h1>Test</h1>\n<p>Content</p>\n```")

    result = await ChangeApplier(llm).apply(CONTENT, [_merge_proposal()], three_sections)

    assert result == "<h1>Test</h1>\n<p>Content</p>"
    assert len(llm.prompts) == 1


@pytest.mark.asyncio
async def test_prompt_carries_full_content_and_change_details(make_llm, three_sections) -> None:
    llm = make_llm("<p>rewritten</p>")

    await ChangeApplier(llm).apply(CONTENT, [_merge_proposal()], three_sections)

    prompt = llm.prompts[0]
    assert "The end" in prompt
    assert 'Section 0: "Introduction"' in prompt
    assert 'Section 2: "Conclusion"' in prompt
    assert "Change 1: merge" in prompt
    assert 'section 0 ("Introduction"), section 1 ("Main Topic")' in prompt
    assert 'New heading: "Getting Started"' in prompt
    assert "Why: Both introduce the topic" in prompt


@pytest.mark.asyncio
async def test_link_fixes_are_applied_before_the_rewrite(make_llm, three_sections) -> None:
    llm = make_llm("<p>rewritten</p>")

    result = await ChangeApplier(llm).apply(
        CONTENT,
        [_link_proposal(BROKEN_URL), _merge_proposal()],
        three_sections,
    )

    prompt = llm.prompts[0]
    assert BROKEN_URL not in prompt
    assert BROKEN_LINK_CLASS in prompt
    assert result == "<p>rewritten</p>"


@pytest.mark.asyncio
async def test_model_errors_propagate(make_llm, three_sections) -> None:
    llm = make_llm(RuntimeError("model timed out"))

    with pytest.raises(RuntimeError, match="model timed out"):
        await ChangeApplier(llm).apply(CONTENT, [_merge_proposal()], three_sections)


@pytest.mark.asyncio
async def test_href_with_surrounding_whitespace_is_fixed(make_llm, three_sections) -> None:
    content = f'<p><a href="  {BROKEN_URL}\n">padded</a></p>'

    result = await ChangeApplier(make_llm()).apply(content, [_link_proposal(BROKEN_URL)], three_sections)

    anchor = BeautifulSoup(result, "html.parser").find("a")
    assert anchor["href"] == "#"
    assert BROKEN_LINK_CLASS in anchor["class"]
