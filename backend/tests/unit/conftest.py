"""Shared fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from app.models import Section


class FakeLLM:
    """Records prompts and returns a canned reply (or raises it)."""

    def __init__(self, reply: str | Exception = "") -> None:
        self.reply = reply
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


@pytest.fixture
def make_llm() -> Callable[..., FakeLLM]:
    return FakeLLM


@pytest.fixture
def three_sections() -> list[Section]:
    headings = ["Introduction", "Main Topic", "Conclusion"]
    return [
        Section(id=f"section-{i}", heading=h, content=f"<p>{h} content</p>", original_index=i)
        for i, h in enumerate(headings)
    ]


@pytest.fixture
def make_sections() -> Callable[[int], list[Section]]:
    def _make(count: int) -> list[Section]:
        return [
            Section(id=f"section-{i}", heading=f"Section {i + 1}", content="", original_index=i)
            for i in range(count)
        ]
    return _make
