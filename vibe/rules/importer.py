import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from vibe.config import AppConfig
from vibe.errors import NotFoundError, OperationCancelledError, VibeError
from vibe.rules.models import CursorRule
from vibe.rules.parser import CompositeRuleParser
from vibe.rules.storage import ConflictPolicy, RuleStorage, StoreResult

logger = logging.getLogger(__name__)

ImportConfirm = Callable[[list[CursorRule]], bool]


@dataclass(frozen=True)
class ImportResult:
    rules: list[CursorRule]
    canonical: StoreResult
    project: Optional[StoreResult] = None
    project_error: Optional[str] = None


class ImportService:
    """Fetch or read a rule source and store what it yields.

    Rules always land in the canonical store. When the working directory
    already has a rules directory they are copied there as well; failing
    that second write only produces a warning.
    """

    def __init__(
        self,
        storage: RuleStorage,
        config: Optional[AppConfig] = None,
        parser: Optional[CompositeRuleParser] = None,
    ) -> None:
        self.storage = storage
        self.config = config or storage.config
        self.parser = parser or CompositeRuleParser()

    def import_rules(
        self,
        source: str,
        force: bool = False,
        confirm: Optional[ImportConfirm] = None,
        cwd: Optional[Path] = None,
        cancel: Optional[threading.Event] = None,
        policy: ConflictPolicy = ConflictPolicy.PROMPT,
    ) -> ImportResult:
        logger.info("Importing rules | source=%s", source)
        rules = self.parser.parse_all(source, cancel=cancel)
        if not rules:
            raise NotFoundError("rules", source)

        if confirm is not None and not confirm(rules):
            raise OperationCancelledError("import")

        canonical = self.storage.store_rules(rules, force_overwrite=force, policy=policy)

        project: Optional[StoreResult] = None
        project_error: Optional[str] = None
        project_rules_dir = (cwd or Path.cwd()) / self.config.rules_dir_name
        if project_rules_dir.is_dir():
            try:
                project = self.storage.store_rules_to_path(
                    rules, project_rules_dir, force_overwrite=force, policy=policy
                )
            except VibeError as exc:
                logger.warning("Failed to store rules in project | path=%s error=%s", project_rules_dir, exc)
                project_error = str(exc)

        logger.info("Imported rules | source=%s count=%d", source, canonical.saved_count)
        return ImportResult(
            rules=rules,
            canonical=canonical,
            project=project,
            project_error=project_error,
        )
