import logging
from pathlib import Path

from vibe.constants import DEFAULT_GITIGNORE_ENTRIES, GITIGNORE_FILENAME

logger = logging.getLogger(__name__)


def _normalize(entry: str) -> str:
    return entry.strip().strip("/")


def gitignore_has_entry(path: Path, entry: str) -> bool:
    wanted = _normalize(entry)
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if _normalize(stripped) == wanted:
            return True
    return False


def ensure_gitignore_entry(project_dir: Path, entry: str) -> bool:
    """Make ``project_dir/.gitignore`` ignore ``entry``.

    A missing file is created with the default entries. Returns True when
    the file was written.
    """
    path = project_dir / GITIGNORE_FILENAME
    if not path.exists():
        lines = list(DEFAULT_GITIGNORE_ENTRIES)
        if entry not in lines:
            lines.append(entry)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        logger.debug("Created gitignore | path=%s", path)
        return True

    if gitignore_has_entry(path, entry):
        logger.debug("Gitignore entry already present | path=%s entry=%s", path, entry)
        return False

    existing = path.read_text(encoding="utf-8")
    prefix = "" if not existing or existing.endswith("\n") else "\n"
    with path.open("a", encoding="utf-8") as handle:
        handle.write(f"{prefix}{entry}\n")
    logger.debug("Appended gitignore entry | path=%s entry=%s", path, entry)
    return True


def top_level_entry(rules_dir_name: str) -> str:
    """``.cursor/rules`` is ignored through its top-level ``.cursor/`` directory."""
    head = Path(rules_dir_name).parts[0] if Path(rules_dir_name).parts else rules_dir_name
    return f"{head}/"
