"""Project initialization and canonical-store synchronization."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from vibe.config import AppConfig, AppPaths
from vibe.constants import AGENT_DEFINITION_EXT
from vibe.errors import NotFoundError, OperationError, SetupError, VibeError
from vibe.projects.registry import ProjectRegistry
from vibe.sync.filesystem import copy_definitions, count_files, has_definition_files
from vibe.sync.git import GitManager
from vibe.sync.gitignore import ensure_gitignore_entry, top_level_entry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InitResult:
    project_dir: Path
    target_dir: Path
    copied: int
    setup_performed: bool
    registered: bool


@dataclass
class MergeResult:
    copied_to_canonical: int = 0
    succeeded: list[Path] = field(default_factory=list)
    failed: dict[Path, str] = field(default_factory=dict)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)


def find_rules_dir(cwd: Path, config: AppConfig, paths: AppPaths) -> Optional[Path]:
    """Prefer the project's rules directory, then the canonical store."""
    local = cwd / config.rules_dir_name
    if has_definition_files(local):
        return local
    canonical = paths.rules_dir(config)
    if config.source_folder:
        canonical = canonical / config.source_folder
    if has_definition_files(canonical):
        return canonical
    return None


class SyncManager:
    def __init__(
        self,
        config: AppConfig,
        paths: AppPaths,
        registry: Optional[ProjectRegistry] = None,
        git: Optional[GitManager] = None,
    ) -> None:
        self.config = config
        self.paths = paths
        self.registry = registry or ProjectRegistry(paths.registry_file(config), config)
        self.git = git or GitManager()

    @property
    def canonical_dir(self) -> Path:
        return self.paths.rules_dir(self.config)

    @property
    def source_dir(self) -> Path:
        if self.config.source_folder:
            return self.canonical_dir / self.config.source_folder
        return self.canonical_dir

    def project_rules_dir(self, project_dir: Path) -> Path:
        return project_dir / self.config.rules_dir_name

    def needs_setup(self) -> bool:
        if not self.canonical_dir.is_dir():
            logger.info("Canonical store missing | path=%s", self.canonical_dir)
            return True
        if not has_definition_files(self.source_dir):
            logger.info("Canonical store has no definitions | path=%s", self.source_dir)
            return True
        return False

    def setup(self) -> None:
        url = self.config.default_repo_url
        try:
            self.git.clone_or_pull(url, self.canonical_dir, dir_mode=self.config.dir_permission)
        except VibeError as exc:
            raise SetupError("Setup", url, "failed to clone agent definitions", exc) from exc
        except OSError as exc:
            raise SetupError("Setup", self.canonical_dir, "failed to prepare canonical store", exc) from exc

        if self.config.source_folder and not self.source_dir.is_dir():
            raise SetupError(
                "Setup",
                self.source_dir,
                f"source folder '{self.config.source_folder}' does not exist in the cloned repository",
            )
        logger.info(
            "Canonical store ready | path=%s files=%d definitions=%d",
            self.canonical_dir,
            count_files(self.canonical_dir),
            count_files(self.source_dir, AGENT_DEFINITION_EXT),
        )

    def init(self, cwd: Optional[Path] = None) -> InitResult:
        project_dir = self._resolve_cwd(cwd)
        target_dir = self.project_rules_dir(project_dir)
        logger.debug(
            "Init | project=%s canonical=%s source_folder=%s",
            project_dir,
            self.canonical_dir,
            self.config.source_folder,
        )

        setup_performed = False
        if self.needs_setup():
            self.setup()
            setup_performed = True

        copied = self._copy("Init", self.source_dir, target_dir)
        registered = self.registry.add_project(project_dir)

        try:
            ensure_gitignore_entry(project_dir, top_level_entry(self.config.rules_dir_name))
        except OSError as exc:
            logger.warning("Could not update .gitignore | project=%s error=%s", project_dir, exc)

        logger.info("Initialized project | project=%s copied=%d", project_dir, copied)
        return InitResult(
            project_dir=project_dir,
            target_dir=target_dir,
            copied=copied,
            setup_performed=setup_performed,
            registered=registered,
        )

    def merge(self, cwd: Optional[Path] = None) -> MergeResult:
        """Push this project's definitions to the canonical store, then to every other project.

        A failing project is recorded in the result and the fan-out goes on.
        """
        project_dir = self._resolve_cwd(cwd)
        local_dir = self.project_rules_dir(project_dir)
        if not local_dir.is_dir():
            raise NotFoundError("rules directory", local_dir)

        result = MergeResult()
        result.copied_to_canonical = self._copy("Merge", local_dir, self.source_dir)

        for project in self.registry.projects:
            other = Path(project)
            if other == project_dir:
                continue
            if not other.is_dir():
                result.failed[other] = "project directory does not exist"
                logger.warning("Skipping missing project | project=%s", other)
                continue
            try:
                self._copy("Merge", self.source_dir, self.project_rules_dir(other))
            except VibeError as exc:
                result.failed[other] = str(exc)
                logger.warning("Merge into project failed | project=%s error=%s", other, exc)
                continue
            result.succeeded.append(other)

        logger.info(
            "Merge finished | succeeded=%d failed=%d",
            result.success_count,
            result.failure_count,
        )
        return result

    def sync(self, cwd: Optional[Path] = None) -> int:
        project_dir = self._resolve_cwd(cwd)
        copied = self._copy("Sync", self.source_dir, self.project_rules_dir(project_dir))
        logger.info("Synced project | project=%s copied=%d", project_dir, copied)
        return copied

    def _copy(self, op: str, source: Path, target: Path) -> int:
        try:
            return copy_definitions(
                source,
                target,
                dir_mode=self.config.dir_permission,
                file_mode=self.config.file_permission,
            )
        except OSError as exc:
            raise OperationError(op, target, f"failed to copy definitions from {source}", exc) from exc

    @staticmethod
    def _resolve_cwd(cwd: Optional[Path]) -> Path:
        if cwd is not None:
            return cwd.resolve()
        try:
            return Path.cwd().resolve()
        except OSError as exc:
            raise OperationError("Init", "cwd", "failed to get current directory", exc) from exc
