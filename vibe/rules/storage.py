"""Persistence of canonical rules as one JSON file per rule."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional

import click

from vibe.config import AppConfig
from vibe.constants import MAX_RULE_FILENAME_LENGTH, RULE_FILE_EXT
from vibe.errors import OperationError, ParseError, ValidationError, VibeError
from vibe.rules.models import CursorRule
from vibe.utils import epoch_stamp, read_json, write_json

logger = logging.getLogger(__name__)

_DISALLOWED_CHARS = ("/", "\\", ":", "*", "?", '"', "<", ">", "|", " ")
_FALLBACK_STEM = "rule"

ConfirmCallback = Callable[[str], bool]


class ConflictPolicy(str, Enum):
    OVERWRITE = "overwrite"
    FAIL = "fail"
    RENAME = "rename"
    SKIP = "skip"
    PROMPT = "prompt"


@dataclass
class StoreResult:
    saved: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def saved_count(self) -> int:
        return len(self.saved)


def sanitize_filename(name: str) -> str:
    """Turn ``name`` into a file stem.

    Filesystems limit names in bytes, so multibyte names are cut on a
    code point boundary rather than by character count.
    """
    result = name.lower()
    for char in _DISALLOWED_CHARS:
        result = result.replace(char, "-")
    encoded = result.encode("utf-8")[:MAX_RULE_FILENAME_LENGTH]
    return encoded.decode("utf-8", errors="ignore") or _FALLBACK_STEM


def rule_filename(name: str) -> str:
    return sanitize_filename(name) + RULE_FILE_EXT


def renamed_path(path: Path, stamp: Optional[str] = None) -> Path:
    """Return a sibling of ``path`` carrying an epoch suffix that does not exist yet."""
    stamp = stamp or epoch_stamp()
    candidate = path.with_name(f"{path.stem}-{stamp}{path.suffix}")
    counter = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.stem}-{stamp}-{counter}{path.suffix}")
        counter += 1
    return candidate


def resolve_rule_path(
    base_dir: Path,
    name: str,
    policy: ConflictPolicy,
    stamp: Optional[str] = None,
) -> Optional[Path]:
    """Decide where a rule named ``name`` is written under ``base_dir``.

    Returns None when the rule must be skipped. ``PROMPT`` is not a
    resolvable policy on its own; callers turn the answer into
    ``OVERWRITE`` or ``RENAME`` first.
    """
    target = base_dir / rule_filename(name)
    if not target.exists():
        return target

    if policy == ConflictPolicy.OVERWRITE:
        return target
    if policy == ConflictPolicy.RENAME:
        return renamed_path(target, stamp)
    if policy == ConflictPolicy.SKIP:
        return None
    if policy == ConflictPolicy.FAIL:
        raise OperationError("StoreRulesToPath", target, "rule file already exists")
    raise ValueError(f"Conflict policy needs an answer before resolving: {policy.value}")


def _default_confirm(message: str) -> bool:
    return click.confirm(message, default=False)


class RuleStorage:
    def __init__(
        self,
        rules_dir: Path,
        config: Optional[AppConfig] = None,
        confirm: Optional[ConfirmCallback] = None,
    ) -> None:
        self.rules_dir = rules_dir
        self.config = config or AppConfig()
        self._confirm = confirm or _default_confirm

    def store_rules(
        self,
        rules: Iterable[CursorRule],
        force_overwrite: bool = False,
        policy: ConflictPolicy = ConflictPolicy.PROMPT,
    ) -> StoreResult:
        return self.store_rules_to_path(rules, self.rules_dir, force_overwrite, policy)

    def store_rules_to_path(
        self,
        rules: Iterable[CursorRule],
        base_dir: Path,
        force_overwrite: bool = False,
        policy: ConflictPolicy = ConflictPolicy.PROMPT,
    ) -> StoreResult:
        """Write ``rules`` under ``base_dir``.

        A collision never aborts the batch: depending on ``policy`` the
        existing file is overwritten, the rule is renamed with an epoch
        suffix or it is skipped. Only a batch that saves nothing fails.
        """
        try:
            base_dir.mkdir(mode=self.config.dir_permission, parents=True, exist_ok=True)
        except OSError as exc:
            raise OperationError("StoreRulesToPath", base_dir, "failed to create directory", exc) from exc

        if force_overwrite:
            policy = ConflictPolicy.OVERWRITE

        result = StoreResult()
        for rule in rules:
            try:
                target = self._target_for(rule, base_dir, policy)
            except OSError as exc:
                raise OperationError(
                    "StoreRulesToPath", base_dir / rule_filename(rule.name), "failed to check rule file", exc
                ) from exc
            if target is None:
                logger.info("Skipped existing rule | name=%s", rule.name)
                result.skipped.append(rule.name)
                continue

            try:
                write_json(target, rule.to_dict(), file_mode=self.config.file_permission)
            except OSError as exc:
                raise OperationError("StoreRulesToPath", target, "failed to write rule file", exc) from exc
            logger.info("Saved rule | name=%s path=%s", rule.name, target)
            result.saved.append(target)

        if not result.saved:
            raise ValidationError("rules", "no rules were saved")
        return result

    def _target_for(self, rule: CursorRule, base_dir: Path, policy: ConflictPolicy) -> Optional[Path]:
        if policy == ConflictPolicy.PROMPT:
            policy = ConflictPolicy.RENAME
            if (base_dir / rule_filename(rule.name)).exists():
                if self._confirm(f"{rule.name} already exists. Overwrite?"):
                    policy = ConflictPolicy.OVERWRITE
        return resolve_rule_path(base_dir, rule.name, policy)

    def load_rule(self, path: Path) -> CursorRule:
        try:
            payload = read_json(path)
        except FileNotFoundError as exc:
            raise OperationError("LoadRule", path, "rule file does not exist", exc) from exc
        except ValueError as exc:
            raise ParseError(path, f"invalid JSON ({exc})") from exc
        except OSError as exc:
            raise OperationError("LoadRule", path, "failed to read rule file", exc) from exc
        return CursorRule.from_dict(payload, source=str(path))

    def list_rules(self) -> list[tuple[Path, CursorRule]]:
        if not self.rules_dir.is_dir():
            return []
        rules: list[tuple[Path, CursorRule]] = []
        for path in sorted(self.rules_dir.glob(f"*{RULE_FILE_EXT}")):
            try:
                rules.append((path, self.load_rule(path)))
            except VibeError as exc:
                logger.warning("Skipping unreadable rule file | path=%s error=%s", path, exc)
        return rules
