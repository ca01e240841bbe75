"""API tests for the blog fetch, analyze and apply endpoints."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable, Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_content_fetcher, get_http_client, get_llm_client
from app.main import app

BLOG_HTML = (
    "<h2>Getting Started</h2><p>Read <a href=\"https://ok.example.com\">the docs</a>.</p>"
    "<h2>Getting Started Guide</h2><p>See <a href=\"https://broken.example.com\">this</a>.</p>"
    "<h2>Conclusion</h2><p>Done.</p>"
)

MERGE_REPLY = json.dumps({
    "needsRestructuring": True,
    "restructuringReason": "The first two sections overlap",
    "suggestions": [{
        "action": "merge",
        "affectedSections": [0, 1],
        "newHeading": "Getting Started",
        "rationale": "Near-identical headings",
        "confidenceLevel": "high",
    }],
})


def _site(request: httpx.Request) -> httpx.Response:
    if request.url.host == "broken.example.com":
        return httpx.Response(404)
    if request.url.host == "unreachable.example.com":
        raise httpx.ConnectError("[Errno -2] Name or service not known")
    return httpx.Response(
        200,
        text="<html><head><title>Post</title></head><body><article><h1>Post</h1><p>Hello</p></article></body></html>",
    )


async def _mock_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(_site)) as client:
        yield client


@pytest.fixture
def client() -> Iterator[TestClient]:
    app.dependency_overrides[get_http_client] = _mock_http_client
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_llm(make_llm) -> Callable:
    """Install a fake LLM for the duration of a test and return it."""
    def _install(reply):
        llm = make_llm(reply)
        app.dependency_overrides[get_llm_client] = lambda: llm
        return llm
    return _install


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_fetch_blog_requires_url(client: TestClient) -> None:
    response = client.post("/api/fetch-blog", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "URL is required"}


def test_fetch_blog_returns_title_and_content(client: TestClient) -> None:
    response = client.post("/api/fetch-blog", json={"url": "https://blog.example.com/post"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["title"] == "Post"
    assert body["data"]["content"] == "<h1>Post</h1><p>Hello</p>"
    assert body["data"]["url"] == "https://blog.example.com/post"


@pytest.mark.parametrize("url", ["https://broken.example.com/post", "https://unreachable.example.com/"])
def test_fetch_blog_failure_is_reported(client: TestClient, url: str) -> None:
    response = client.post("/api/fetch-blog", json={"url": url})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to fetch blog content"
    assert body["details"]


def test_analyze_blog_requires_content(client: TestClient) -> None:
    response = client.post("/api/analyze-blog", json={"title": "No content"})

    assert response.status_code == 400
    assert response.json()["error"] == "Content is required"


def test_analyze_blog_returns_camel_case_results(client: TestClient, use_llm) -> None:
    llm = use_llm(MERGE_REPLY)

    response = client.post("/api/analyze-blog", json={"content": BLOG_HTML, "title": "Guide"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert [s["heading"] for s in data["sections"]] == ["Getting Started", "Getting Started Guide", "Conclusion"]
    assert data["sections"][1]["originalIndex"] == 1
    assert [e["working"] for e in data["linkEvaluations"]] == [True, False]
    assert data["linkEvaluations"][1]["issue"] == "Page not found"
    assert data["structureAnalysis"]["needsRestructuring"] is True
    assert data["structureAnalysis"]["currentSectionCount"] == 3
    assert [p["type"] for p in data["proposals"]] == ["link-fixes", "structure"]
    assert data["proposals"][0]["affectedLinks"][0]["url"] == "https://broken.example.com"
    assert data["proposals"][1]["affectedSections"] == [0, 1]
    assert len(llm.prompts) == 1


def test_analyze_blog_survives_model_failure(client: TestClient, use_llm) -> None:
    use_llm(RuntimeError("provider down"))

    response = client.post("/api/analyze-blog", json={"content": BLOG_HTML, "title": "Guide"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["structureAnalysis"]["needsRestructuring"] is False
    assert data["structureAnalysis"]["restructuringReason"] == "Structure analysis unavailable"
    assert [p["type"] for p in data["proposals"]] == ["link-fixes"]


def test_apply_changes_requires_proposals(client: TestClient) -> None:
    response = client.post("/api/apply-changes", json={"content": BLOG_HTML})

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required data"


def test_apply_changes_with_link_fix(client: TestClient, use_llm) -> None:
    llm = use_llm("unused")
    proposal = {
        "id": "proposal-links",
        "type": "link-fixes",
        "title": "Fix Broken Links",
        "approved": True,
        "affectedLinks": [{"id": "link-1", "url": "https://broken.example.com", "working": False}],
    }

    response = client.post(
        "/api/apply-changes",
        json={"content": BLOG_HTML, "approvedProposals": [proposal], "originalSections": []},
    )

    assert response.status_code == 200
    refreshed = response.json()["data"]["refreshedContent"]
    assert "https://broken.example.com" not in refreshed
    assert "broken-link-removed" in refreshed
    assert llm.prompts == []


def test_apply_changes_model_failure_is_500(client: TestClient, use_llm) -> None:
    use_llm(RuntimeError("provider down"))
    proposal = {
        "id": "proposal-structure-0",
        "type": "structure",
        "action": "merge",
        "affectedSections": [0, 1],
        "rationale": "Overlap",
        "approved": True,
    }

    response = client.post(
        "/api/apply-changes",
        json={
            "content": BLOG_HTML,
            "approvedProposals": [proposal],
            "originalSections": [{"heading": "Getting Started"}, {"heading": "Getting Started Guide"}],
        },
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to apply changes", "details": "provider down"}


def test_malformed_json_is_a_bad_request(client: TestClient) -> None:
    response = client.post(
        "/api/analyze-blog",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


def test_unknown_proposal_type_is_a_bad_request(client: TestClient) -> None:
    response = client.post(
        "/api/apply-changes",
        json={"content": BLOG_HTML, "approvedProposals": [{"type": "mystery"}]},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


class _BrokenExtractor:
    async def fetch(self, url: str):
        raise ValueError("markup could not be parsed")


def test_fetch_blog_extraction_error_keeps_error_body(client: TestClient) -> None:
    app.dependency_overrides[get_content_fetcher] = lambda: _BrokenExtractor()

    response = client.post("/api/fetch-blog", json={"url": "https://blog.example.com/post"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch blog content", "details": "markup could not be parsed"}
