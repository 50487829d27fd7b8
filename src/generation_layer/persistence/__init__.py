"""
Project persistence.

- project_store.py: LocalProjectStore, one directory per generated project

Storage Strategy:
- Generated files written under {PROJECTS_DIR}/{project_id}/
- Metadata (options, providers, QA scores) in .generation/metadata.json
- Markdown evaluation report in .generation/evaluation.md
- Fresh directory per run; existing directories are never reused
"""

from generation_layer.persistence.project_store import LocalProjectStore

__all__ = [
    "LocalProjectStore",
]
