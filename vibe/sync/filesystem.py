import logging
import os
import shutil
from pathlib import Path
from typing import Iterator

from vibe.constants import AGENT_DEFINITION_EXT, COPY_EXCLUDED_DIRS

logger = logging.getLogger(__name__)


def iter_definition_files(root: Path) -> Iterator[Path]:
    """Yield definition files under ``root``, never entering excluded directories."""
    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in COPY_EXCLUDED_DIRS)
        for filename in sorted(filenames):
            if filename.endswith(AGENT_DEFINITION_EXT):
                yield Path(current) / filename


def has_definition_files(root: Path) -> bool:
    if not root.is_dir():
        return False
    return next(iter_definition_files(root), None) is not None


def count_files(root: Path, extension: str = "") -> int:
    if not root.is_dir():
        return 0
    return sum(
        1 for path in root.rglob("*") if path.is_file() and (not extension or path.name.endswith(extension))
    )


def copy_definitions(source: Path, target: Path, dir_mode: int = 0o755, file_mode: int = 0o644) -> int:
    """Copy definition files from ``source`` into ``target``, keeping the layout.

    Only definition files are copied and excluded directories are never
    walked. Existing files in ``target`` are overwritten. Returns the
    number of files copied.
    """
    if not source.is_dir():
        raise FileNotFoundError(f"Source directory does not exist: {source}")

    target.mkdir(mode=dir_mode, parents=True, exist_ok=True)
    copied = 0
    for path in iter_definition_files(source):
        destination = target / path.relative_to(source)
        if destination.resolve() == path.resolve():
            continue
        destination.parent.mkdir(mode=dir_mode, parents=True, exist_ok=True)
        shutil.copyfile(path, destination)
        os.chmod(destination, file_mode)
        logger.debug("Copied definition | source=%s target=%s", path, destination)
        copied += 1
    return copied
