"""Integration test fixtures (FastAPI app with overridden dependencies).

The real app, routers, middleware and exception handlers are exercised;
only provider invokers, the evaluator, the project store and the Figma
source are replaced through app.dependency_overrides.
"""

import pytest
from fastapi.testclient import TestClient

from generation_layer.api.dependencies import (
    get_evaluator,
    get_figma_source,
    get_pipeline,
    get_primary_invoker,
    get_project_store,
    get_settings,
)
from generation_layer.evaluation import (
    BEST_PRACTICE_RULES,
    STATIC_ANALYSIS_RULES,
    MultiModelEvaluator,
    RuleBasedRater,
    WeightedRater,
)
from generation_layer.main import app
from generation_layer.persistence import LocalProjectStore
from generation_layer.pipeline import GenerationPipeline


@pytest.fixture
def project_store(test_settings) -> LocalProjectStore:
    """Project store under tmp_path (from test_settings.PROJECTS_DIR)."""
    return LocalProjectStore(test_settings.PROJECTS_DIR)


@pytest.fixture
def rule_evaluator() -> MultiModelEvaluator:
    """Evaluator with the deterministic rule-based raters only."""
    return MultiModelEvaluator([
        WeightedRater(RuleBasedRater(STATIC_ANALYSIS_RULES), 0.5),
        WeightedRater(RuleBasedRater(BEST_PRACTICE_RULES), 0.5),
    ])


@pytest.fixture
def make_client(test_settings, project_store, rule_evaluator, prompt_builder):
    """Factory for a TestClient whose pipeline uses the given invokers.

    Usage:
        client = make_client(scripted_invoker("gemini", [answer]))
    """

    def factory(primary, secondary=None, evaluator=rule_evaluator, figma=None, config=test_settings):
        def pipeline_override() -> GenerationPipeline:
            return GenerationPipeline(
                primary,
                secondary=secondary,
                evaluator=evaluator,
                store=project_store,
                prompt_builder=prompt_builder,
                recovery_attempts=config.RECOVERY_MAX_ATTEMPTS,
            )

        app.dependency_overrides[get_settings] = lambda: config
        app.dependency_overrides[get_project_store] = lambda: project_store
        app.dependency_overrides[get_evaluator] = lambda: evaluator
        app.dependency_overrides[get_figma_source] = lambda: figma
        app.dependency_overrides[get_pipeline] = pipeline_override
        app.dependency_overrides[get_primary_invoker] = lambda: primary
        return TestClient(app)

    yield factory

    app.dependency_overrides.clear()
