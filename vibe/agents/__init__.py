from vibe.agents.context import AgentContext, ContextStore
from vibe.agents.loader import AgentLoader, LoadedAgent
from vibe.agents.models import AgentDefinition, ScanEvent, ScanEventKind, ScanResult, SkippedEntry
from vibe.agents.registry import AgentRegistry

__all__ = [
    "AgentContext",
    "AgentDefinition",
    "AgentLoader",
    "AgentRegistry",
    "ContextStore",
    "LoadedAgent",
    "ScanEvent",
    "ScanEventKind",
    "ScanResult",
    "SkippedEntry",
]
