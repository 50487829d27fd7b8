"""
FastAPI dependency injection for the UI generation layer.

Provides singleton instances of expensive resources (provider invokers with
their HTTP pools, prompt builder, evaluator, project store) and the
pipeline built from them. Tests replace any of these through
app.dependency_overrides.
"""

from functools import lru_cache
from typing import Optional

import structlog
from fastapi import Depends

from generation_layer.config import Settings, settings
from generation_layer.design.figma import FigmaDesignSource
from generation_layer.evaluation.evaluator import MultiModelEvaluator, build_reference_evaluator
from generation_layer.llm.invoker import ResilientInvoker
from generation_layer.llm.prompt_builder import PromptBuilder
from generation_layer.llm.registry import build_invoker, is_provider_configured
from generation_layer.persistence.project_store import LocalProjectStore
from generation_layer.pipeline.orchestrator import GenerationPipeline

logger = structlog.get_logger(__name__)


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.

    Returns:
        Settings instance
    """
    return settings


@lru_cache()
def get_prompt_builder() -> PromptBuilder:
    """
    Get singleton prompt builder.

    Loads Jinja2 templates once and reuses them across requests.
    """
    return PromptBuilder()


@lru_cache()
def get_primary_invoker() -> ResilientInvoker:
    """
    Get singleton invoker for the primary provider.

    Raises:
        ProviderNotConfigured: No keys/models configured for PRIMARY_PROVIDER
    """
    config = get_settings()
    return build_invoker(config.PRIMARY_PROVIDER, config)


@lru_cache()
def get_secondary_invoker() -> Optional[ResilientInvoker]:
    """
    Get singleton invoker for the secondary provider, or None when it is
    unset, equal to the primary, or missing credentials.
    """
    config = get_settings()
    provider = config.SECONDARY_PROVIDER
    if not provider or provider == config.PRIMARY_PROVIDER:
        return None
    if not is_provider_configured(provider, config):
        logger.warning("Secondary provider not configured, running single-provider", provider=provider)
        return None
    return build_invoker(provider, config)


@lru_cache()
def get_evaluator() -> Optional[MultiModelEvaluator]:
    """
    Get singleton multi-model evaluator (None when evaluation is disabled).
    """
    config = get_settings()
    if not config.EVALUATION_ENABLED:
        return None
    return build_reference_evaluator(
        get_primary_invoker(),
        get_secondary_invoker(),
        weights=config.EVALUATOR_WEIGHTS,
        rater_timeout=config.RATER_TIMEOUT,
        prompt_builder=get_prompt_builder(),
        max_recovery_attempts=config.RECOVERY_MAX_ATTEMPTS,
    )


@lru_cache()
def get_project_store() -> LocalProjectStore:
    """Get singleton local project store rooted at PROJECTS_DIR."""
    return LocalProjectStore(get_settings().PROJECTS_DIR)


@lru_cache()
def get_figma_source() -> Optional[FigmaDesignSource]:
    """Get singleton Figma client (None when no access token is configured)."""
    config = get_settings()
    if not config.FIGMA_ACCESS_TOKEN:
        return None
    return FigmaDesignSource(
        access_token=config.FIGMA_ACCESS_TOKEN,
        base_url=config.FIGMA_API_BASE_URL,
    )


def get_pipeline(
    config: Settings = Depends(get_settings),
    store: LocalProjectStore = Depends(get_project_store),
) -> GenerationPipeline:
    """
    Create the generation pipeline with injected dependencies.

    Note: GenerationPipeline is NOT cached because it's lightweight and
    stateless. All heavy resources (invokers, builder, evaluator) are
    singletons.
    """
    return GenerationPipeline(
        primary=get_primary_invoker(),
        secondary=get_secondary_invoker(),
        evaluator=get_evaluator(),
        store=store,
        prompt_builder=get_prompt_builder(),
        recovery_attempts=config.RECOVERY_MAX_ATTEMPTS,
    )


async def close_resources() -> None:
    """Close provider and Figma HTTP pools that were created."""
    if get_primary_invoker.cache_info().currsize:
        await get_primary_invoker().close()
    if get_secondary_invoker.cache_info().currsize:
        secondary = get_secondary_invoker()
        if secondary is not None:
            await secondary.close()
    if get_figma_source.cache_info().currsize:
        figma = get_figma_source()
        if figma is not None:
            await figma.close()
