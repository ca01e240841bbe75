"""Blog fetch, analysis and change application routes."""

import logging

import httpx
from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from app.api.deps import Analyzer, Applier, Evaluator, Fetcher, Generator
from app.api.errors import APIError
from app.models import LinkEvaluation, Proposal, Section, StructureAnalysis
from app.models.base import CamelModel
from app.services.blog_parser import BlogParser

logger = logging.getLogger(__name__)

router = APIRouter()


class FetchBlogRequest(BaseModel):
    """Request to fetch a blog post by URL."""

    url: str | None = None


class FetchBlogData(CamelModel):
    title: str
    content: str
    url: str


class FetchBlogResponse(BaseModel):
    success: bool = True
    data: FetchBlogData


class AnalyzeBlogRequest(BaseModel):
    """Raw post HTML to analyze."""

    content: str | None = None
    title: str | None = None


class AnalyzeBlogData(CamelModel):
    sections: list[Section]
    link_evaluations: list[LinkEvaluation]
    structure_analysis: StructureAnalysis
    proposals: list[Proposal]


class AnalyzeBlogResponse(BaseModel):
    success: bool = True
    data: AnalyzeBlogData


class ApplyChangesRequest(CamelModel):
    """Post HTML plus the proposals the reviewer approved."""

    content: str | None = None
    approved_proposals: list[Proposal] | None = None
    original_sections: list[Section] = Field(default_factory=list)


class ApplyChangesData(CamelModel):
    refreshed_content: str


class ApplyChangesResponse(BaseModel):
    success: bool = True
    data: ApplyChangesData


@router.post("/fetch-blog", response_model=FetchBlogResponse)
async def fetch_blog(request: FetchBlogRequest, fetcher: Fetcher) -> FetchBlogResponse:
    """Fetch a post by URL and extract its title and main content."""
    if not request.url:
        raise APIError(status.HTTP_400_BAD_REQUEST, "URL is required")

    try:
        blog = await fetcher.fetch(request.url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error(f"Error fetching blog: {e}")
        raise APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to fetch blog content",
            str(e) or type(e).__name__,
        )
    except Exception as e:
        logger.exception("Error extracting blog content")
        raise APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to fetch blog content",
            str(e) or type(e).__name__,
        )

    return FetchBlogResponse(
        data=FetchBlogData(title=blog.title, content=blog.content, url=blog.url),
    )


@router.post("/analyze-blog", response_model=AnalyzeBlogResponse)
async def analyze_blog(
    request: AnalyzeBlogRequest,
    evaluator: Evaluator,
    analyzer: Analyzer,
    generator: Generator,
) -> AnalyzeBlogResponse:
    """Check links, analyze structure and propose improvements."""
    if not request.content:
        raise APIError(status.HTTP_400_BAD_REQUEST, "Content is required")

    title = request.title or ""
    logger.info(f'Analyzing blog: "{title}"')

    try:
        parsed = BlogParser().parse(request.content)
        logger.info(f"Found {len(parsed.sections)} sections and {len(parsed.links)} links")
        if not parsed.sections:
            logger.warning("No H2 sections found, blog might use different structure")

        # Step 1: Check link validity
        link_evaluations = await evaluator.evaluate(parsed.links)

        # Step 2: Structure analysis (degrades to an empty analysis on AI failure)
        structure_analysis = await analyzer.analyze(parsed.sections, title)

        # Step 3: Generate proposals
        proposals = generator.generate(parsed.sections, link_evaluations, structure_analysis)
    except Exception as e:
        logger.exception("Error analyzing blog")
        raise APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to analyze blog",
            str(e) or type(e).__name__,
        )

    return AnalyzeBlogResponse(
        data=AnalyzeBlogData(
            sections=parsed.sections,
            link_evaluations=link_evaluations,
            structure_analysis=structure_analysis,
            proposals=proposals,
        ),
    )


@router.post("/apply-changes", response_model=ApplyChangesResponse)
async def apply_changes(request: ApplyChangesRequest, applier: Applier) -> ApplyChangesResponse:
    """Regenerate the post with only the approved proposals applied."""
    if not request.content or request.approved_proposals is None:
        raise APIError(status.HTTP_400_BAD_REQUEST, "Missing required data")

    try:
        refreshed = await applier.apply(
            request.content,
            request.approved_proposals,
            request.original_sections,
        )
    except Exception as e:
        logger.exception("Error applying changes")
        raise APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to apply changes",
            str(e) or type(e).__name__,
        )

    return ApplyChangesResponse(data=ApplyChangesData(refreshed_content=refreshed))
