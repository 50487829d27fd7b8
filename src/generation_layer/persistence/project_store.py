"""
Local filesystem project store.

Layout:
    {root}/{project_id}/                 generated files, as relative paths
    {root}/{project_id}/.generation/metadata.json
    {root}/{project_id}/.generation/evaluation.md   (when evaluated)

Each run writes a fresh, uniquely named directory; writing into an existing
project directory is refused, so concurrent runs never share a path.
Blocking file I/O runs in worker threads.

Lookups of unknown or malformed project ids are normal not-found results
(None / False), never exceptions.
"""

import asyncio
import json
import re
import shutil
from pathlib import Path
from typing import Any, Optional

import structlog

logger = structlog.get_logger(__name__)

METADATA_DIR = ".generation"
METADATA_FILE = "metadata.json"
REPORT_FILE = "evaluation.md"

PROJECT_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,127}$")


class LocalProjectStore:
    """
    Project store backed by a local directory.

    Attributes:
        root: Directory holding one subdirectory per project
    """

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()
        logger.debug("LocalProjectStore initialized", root=str(self.root))

    def _project_dir(self, project_id: str) -> Optional[Path]:
        if not PROJECT_ID_PATTERN.match(project_id):
            return None
        return self.root / project_id

    def _target(self, project_dir: Path, relative_path: str) -> Path:
        target = (project_dir / relative_path).resolve()
        if not target.is_relative_to(project_dir):
            raise ValueError(f"Path escapes project directory: {relative_path}")
        return target

    # === Sync implementations (run in worker threads) ===

    def _write_sync(
        self,
        project_id: str,
        files: dict[str, str],
        metadata: dict[str, Any],
        report: Optional[str],
    ) -> str:
        project_dir = self._project_dir(project_id)
        if project_dir is None:
            raise ValueError(f"Invalid project id: {project_id}")

        self.root.mkdir(parents=True, exist_ok=True)
        project_dir.mkdir(exist_ok=False)

        try:
            for relative_path, content in files.items():
                target = self._target(project_dir, relative_path)
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content, encoding="utf-8")

            meta_dir = project_dir / METADATA_DIR
            meta_dir.mkdir(exist_ok=True)
            record = {**metadata, "files": sorted(files)}
            (meta_dir / METADATA_FILE).write_text(
                json.dumps(record, indent=2, ensure_ascii=False), encoding="utf-8"
            )
            if report:
                (meta_dir / REPORT_FILE).write_text(report, encoding="utf-8")
        except BaseException:
            # No project directory survives without its metadata
            shutil.rmtree(project_dir, ignore_errors=True)
            raise

        return str(project_dir)

    def _read_metadata(self, project_dir: Path) -> Optional[dict[str, Any]]:
        metadata_path = project_dir / METADATA_DIR / METADATA_FILE
        if not metadata_path.is_file():
            return None
        try:
            return json.loads(metadata_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning("Unreadable project metadata", path=str(metadata_path), error=str(e))
            return None

    def _list_sync(self) -> list[dict[str, Any]]:
        if not self.root.is_dir():
            return []
        projects = []
        for project_dir in self.root.iterdir():
            if not project_dir.is_dir() or not PROJECT_ID_PATTERN.match(project_dir.name):
                continue
            metadata = self._read_metadata(project_dir)
            if metadata is None:
                continue
            metadata.setdefault("projectId", project_dir.name)
            metadata["location"] = str(project_dir)
            projects.append(metadata)
        projects.sort(key=lambda item: item.get("createdAt", ""), reverse=True)
        return projects

    def _get_sync(self, project_id: str) -> Optional[dict[str, Any]]:
        project_dir = self._project_dir(project_id)
        if project_dir is None or not project_dir.is_dir():
            return None
        metadata = self._read_metadata(project_dir)
        if metadata is None:
            return None

        files: dict[str, str] = {}
        for path in sorted(project_dir.rglob("*")):
            relative = path.relative_to(project_dir)
            if not path.is_file() or relative.parts[0] == METADATA_DIR:
                continue
            files[relative.as_posix()] = path.read_text(encoding="utf-8", errors="replace")

        report_path = project_dir / METADATA_DIR / REPORT_FILE
        metadata.setdefault("projectId", project_id)
        metadata["location"] = str(project_dir)
        metadata["files"] = files
        metadata["report"] = report_path.read_text(encoding="utf-8") if report_path.is_file() else None
        return metadata

    def _delete_sync(self, project_id: str) -> bool:
        project_dir = self._project_dir(project_id)
        if project_dir is None or not project_dir.is_dir():
            return False
        shutil.rmtree(project_dir)
        return True

    # === Async API ===

    async def write_project(
        self,
        project_id: str,
        files: dict[str, str],
        metadata: dict[str, Any],
        report: Optional[str] = None,
    ) -> str:
        """
        Write a project's files and metadata.

        Args:
            project_id: Unique id; its directory must not exist yet
            files: Relative path -> content
            metadata: JSON-serializable project metadata
            report: Optional markdown evaluation report

        Returns:
            Absolute path of the project directory

        Raises:
            FileExistsError: Project directory already exists
            ValueError: Invalid id or a path escaping the project directory
            OSError: Filesystem failure
        """
        location = await asyncio.to_thread(self._write_sync, project_id, files, metadata, report)
        logger.info("Project written", project_id=project_id, files=len(files), location=location)
        return location

    async def list_projects(self) -> list[dict[str, Any]]:
        """Metadata of every stored project, newest first."""
        return await asyncio.to_thread(self._list_sync)

    async def get_project(self, project_id: str) -> Optional[dict[str, Any]]:
        """
        Metadata plus file contents, or None if the project does not exist.
        """
        project = await asyncio.to_thread(self._get_sync, project_id)
        if project is None:
            logger.debug("Project not found", project_id=project_id)
        return project

    async def delete_project(self, project_id: str) -> bool:
        """Delete a project. Returns False if it did not exist."""
        deleted = await asyncio.to_thread(self._delete_sync, project_id)
        logger.info(
            "Deleted project" if deleted else "Project not found for deletion",
            project_id=project_id,
        )
        return deleted
