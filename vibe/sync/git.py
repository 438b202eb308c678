"""Thin wrapper around the git CLI used to populate the canonical store."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional, Protocol, Sequence

from vibe.constants import GIT_DIRNAME
from vibe.errors import OperationError

logger = logging.getLogger(__name__)


class GitService(Protocol):
    def clone(self, url: str, dest: Path) -> None: ...

    def pull(self, repo: Path) -> None: ...

    def checkout(self, repo: Path, ref: str) -> None: ...


class GitCommandService:
    def __init__(self, executable: str = "git", timeout: Optional[float] = None) -> None:
        self.executable = executable
        self.timeout = timeout

    def clone(self, url: str, dest: Path) -> None:
        self._run("clone", ["clone", url, str(dest)], dest)

    def pull(self, repo: Path) -> None:
        self._run("pull", ["-C", str(repo), "pull"], repo)

    def checkout(self, repo: Path, ref: str) -> None:
        self._run("checkout", ["-C", str(repo), "checkout", ref], repo)

    def _run(self, name: str, args: Sequence[str], path: Path) -> None:
        command = [self.executable, *args]
        logger.debug("Running git | command=%s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise OperationError(f"git {name}", path, "could not run git", exc) from exc
        if result.returncode != 0:
            output = (result.stdout + result.stderr).strip()
            raise OperationError(
                f"git {name}",
                path,
                f"exit status {result.returncode}\nOutput: {output}",
            )


class GitManager:
    def __init__(self, service: Optional[GitService] = None) -> None:
        self.service = service or GitCommandService()

    def clone_or_pull(self, url: str, dest: Path, dir_mode: int = 0o755) -> str:
        """Clone ``url`` into ``dest``, or pull when it is already a checkout.

        Returns ``"clone"`` or ``"pull"``.
        """
        dest.parent.mkdir(mode=dir_mode, parents=True, exist_ok=True)
        if not (dest / GIT_DIRNAME).exists():
            logger.info("Cloning repository | url=%s dest=%s", url, dest)
            self.service.clone(url, dest)
            return "clone"
        logger.info("Pulling repository | dest=%s", dest)
        self.service.pull(dest)
        return "pull"
