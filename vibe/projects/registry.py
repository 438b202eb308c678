"""Persisted list of project directories initialized with vibe."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional, Union

from vibe.config import AppConfig
from vibe.errors import OperationError, ParseError
from vibe.utils import read_json_safe, write_json

logger = logging.getLogger(__name__)

REGISTRY_INDENT = 4


class ProjectRegistry:
    """Ordered, de-duplicated project paths stored as ``{"projects": [...]}``.

    Access is serialized with an in-process lock. Other processes writing
    the same file are not coordinated with.
    """

    def __init__(self, path: Path, config: Optional[AppConfig] = None) -> None:
        self.path = path
        self.config = config or AppConfig()
        self._lock = threading.RLock()
        self._projects: list[str] = []
        self._load_or_create()

    def _load_or_create(self) -> None:
        logger.debug("Loading project registry | path=%s", self.path)
        if not self.path.exists():
            logger.debug("Project registry missing, creating | path=%s", self.path)
            self._save()
            return

        payload, error = read_json_safe(self.path)
        if error is not None:
            raise ParseError(self.path, f"invalid JSON ({error})")
        if payload is None:
            return
        projects = payload.get("projects") if isinstance(payload, dict) else None
        if not isinstance(projects, list) or not all(isinstance(item, str) for item in projects):
            raise ParseError(self.path, "'projects' must be a list of paths")

        seen: set[str] = set()
        for item in projects:
            if item not in seen:
                self._projects.append(item)
                seen.add(item)
        logger.debug("Project registry loaded | projects=%d", len(self._projects))

    @property
    def projects(self) -> list[str]:
        with self._lock:
            return list(self._projects)

    def __contains__(self, project: Union[str, Path]) -> bool:
        with self._lock:
            return _normalize(project) in self._projects

    def add_project(self, project: Union[str, Path]) -> bool:
        """Register ``project``. Returns False when it was already known."""
        normalized = _normalize(project)
        with self._lock:
            if normalized in self._projects:
                logger.debug("Project already registered | project=%s", normalized)
                return False
            self._projects.append(normalized)
            self._save()
        logger.info("Registered project | project=%s", normalized)
        return True

    def clean_projects(self) -> int:
        with self._lock:
            kept = [project for project in self._projects if Path(project).is_dir()]
            removed = len(self._projects) - len(kept)
            if removed:
                for project in self._projects:
                    if project not in kept:
                        logger.debug("Removing missing project | project=%s", project)
                self._projects = kept
                self._save()
        logger.info("Project registry cleaned | removed=%d", removed)
        return removed

    def _save(self) -> None:
        try:
            write_json(
                self.path,
                {"projects": list(self._projects)},
                indent=REGISTRY_INDENT,
                file_mode=self.config.file_permission,
                dir_mode=self.config.dir_permission,
            )
        except OSError as exc:
            raise OperationError("SaveRegistry", self.path, "failed to write registry", exc) from exc
        logger.debug("Project registry saved | path=%s", self.path)


def _normalize(project: Union[str, Path]) -> str:
    return str(Path(project).expanduser().resolve())
