"""Dependency injection for FastAPI routes."""

from collections.abc import AsyncIterator
from typing import Annotated

import httpx
from fastapi import Depends

from app.config import Settings, get_settings
from app.services.change_applier import ChangeApplier
from app.services.content_fetcher import ContentFetcher
from app.services.link_evaluator import LinkEvaluator
from app.services.llm_client import LLMClient, TextGenerator
from app.services.proposal_generator import ProposalGenerator
from app.services.structure_analyzer import StructureAnalyzer
from app.services.structure_policy import StructurePolicy

AppSettings = Annotated[Settings, Depends(get_settings)]


async def get_http_client(settings: AppSettings) -> AsyncIterator[httpx.AsyncClient]:
    """Outbound HTTP client scoped to a single request."""
    async with httpx.AsyncClient(
        max_redirects=settings.link_max_redirects,
        headers={"User-Agent": settings.user_agent},
    ) as client:
        yield client


def get_llm_client(settings: AppSettings) -> TextGenerator:
    return LLMClient(settings)


def get_structure_policy(settings: AppSettings) -> StructurePolicy:
    return StructurePolicy.from_settings(settings)


HttpClient = Annotated[httpx.AsyncClient, Depends(get_http_client)]
LLM = Annotated[TextGenerator, Depends(get_llm_client)]
Policy = Annotated[StructurePolicy, Depends(get_structure_policy)]


def get_content_fetcher(client: HttpClient, settings: AppSettings) -> ContentFetcher:
    return ContentFetcher(client, settings)


def get_link_evaluator(client: HttpClient, settings: AppSettings) -> LinkEvaluator:
    return LinkEvaluator(client, settings)


def get_structure_analyzer(llm: LLM, policy: Policy) -> StructureAnalyzer:
    return StructureAnalyzer(llm, policy)


def get_proposal_generator(policy: Policy) -> ProposalGenerator:
    return ProposalGenerator(policy)


def get_change_applier(llm: LLM) -> ChangeApplier:
    return ChangeApplier(llm)


# Type aliases for dependency injection
Fetcher = Annotated[ContentFetcher, Depends(get_content_fetcher)]
Evaluator = Annotated[LinkEvaluator, Depends(get_link_evaluator)]
Analyzer = Annotated[StructureAnalyzer, Depends(get_structure_analyzer)]
Generator = Annotated[ProposalGenerator, Depends(get_proposal_generator)]
Applier = Annotated[ChangeApplier, Depends(get_change_applier)]
