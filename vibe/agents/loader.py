import logging
import threading
from dataclasses import dataclass
from typing import Optional

from vibe.agents.context import AgentContext, ContextStore
from vibe.agents.models import AgentDefinition
from vibe.agents.registry import AgentRegistry
from vibe.errors import OperationCancelledError

logger = logging.getLogger(__name__)


@dataclass
class LoadedAgent:
    definition: AgentDefinition
    context: AgentContext


class AgentLoader:
    def __init__(self, registry: AgentRegistry, contexts: Optional[ContextStore] = None) -> None:
        self.registry = registry
        self.contexts = contexts

    def load(
        self,
        agent_id: str,
        context: Optional[AgentContext] = None,
        cancel: Optional[threading.Event] = None,
    ) -> LoadedAgent:
        """Look up ``agent_id`` and pair it with a context.

        Without an explicit context the persisted one is reused when a
        store is configured, otherwise a fresh one is built from the
        definition. ``cancel`` is checked before and after the lookup.
        """
        logger.debug("Loading agent | id=%s", agent_id)
        self._check_cancelled(cancel)
        definition = self.registry.get_agent(agent_id)
        self._check_cancelled(cancel)

        if context is None and self.contexts is not None:
            context = self.contexts.load(definition.id)
        if context is None:
            context = AgentContext.for_agent(definition)

        logger.info("Agent loaded | id=%s name=%s", definition.id, definition.name)
        return LoadedAgent(definition=definition, context=context)

    @staticmethod
    def _check_cancelled(cancel: Optional[threading.Event]) -> None:
        if cancel is not None and cancel.is_set():
            raise OperationCancelledError("agent loading")
