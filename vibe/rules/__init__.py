from vibe.rules.models import CursorRule, ParsedRule, RuleMetadata, Template
from vibe.rules.parser import CompositeRuleParser, FileRuleParser, ParserConfig, WebRuleParser
from vibe.rules.storage import ConflictPolicy, RuleStorage, StoreResult, sanitize_filename

__all__ = [
    "CompositeRuleParser",
    "ConflictPolicy",
    "CursorRule",
    "FileRuleParser",
    "ParsedRule",
    "ParserConfig",
    "RuleMetadata",
    "RuleStorage",
    "StoreResult",
    "Template",
    "WebRuleParser",
    "sanitize_filename",
]
