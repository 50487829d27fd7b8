"""
FastAPI API routes and endpoints.

- routes_generation.py: Generation endpoints (POST /generate, /generate/text,
  /generate/figma, /evaluate, GET /health)
- routes_projects.py: Project store endpoints (GET/DELETE /projects)
- dependencies.py: Dependency injection for invokers, evaluator, pipeline, store
- models.py: API-specific request/response models
- error_handlers.py: Exception handlers for structured error responses
"""

from generation_layer.api import dependencies, error_handlers, models
from generation_layer.api.routes_generation import router as generation_router
from generation_layer.api.routes_projects import router as projects_router

__all__ = [
    "generation_router",
    "projects_router",
    "dependencies",
    "error_handlers",
    "models",
]
