"""Interactive Textual-based agent selector."""

from __future__ import annotations

import threading
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, OptionList, Static
from textual.widgets.option_list import Option

from vibe.agents.models import AgentDefinition

CANCEL_POLL_SECONDS = 0.2


class AgentSelectorApp(App[Optional[str]]):
    """Pick one agent. Exits with its ID, or None when cancelled."""

    TITLE = "Agent Selector"
    CSS = """
    Screen {
        layout: vertical;
    }
    #info {
        height: 3;
        content-align: center middle;
        background: $primary-darken-2;
        color: $text;
        padding: 0 1;
    }
    OptionList {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("q", "quit_app", "Quit"),
        Binding("escape", "quit_app", "Quit", show=False),
    ]

    def __init__(
        self,
        agents: list[AgentDefinition],
        selected_id: str = "",
        cancel: Optional[threading.Event] = None,
    ) -> None:
        super().__init__()
        self._agents = agents
        self._selected_id = selected_id
        self._cancel = cancel

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(
            f"Agents: {len(self._agents)} | Use [up/down] to move, [enter] to select, [q] to quit",
            id="info",
        )
        options = []
        for agent in self._agents:
            label = agent.name
            if agent.description:
                label = f"{agent.name} - {agent.description}"
            if agent.id == self._selected_id:
                label = f"{label} (last used)"
            options.append(Option(label, id=agent.id))
        yield OptionList(*options)
        yield Footer()

    def on_mount(self) -> None:
        option_list = self.query_one(OptionList)
        for index, agent in enumerate(self._agents):
            if agent.id == self._selected_id:
                option_list.highlighted = index
                break
        if self._cancel is not None:
            self.set_interval(CANCEL_POLL_SECONDS, self._check_cancelled)

    def _check_cancelled(self) -> None:
        if self._cancel is not None and self._cancel.is_set():
            self.exit(None)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.exit(event.option.id)

    def action_quit_app(self) -> None:
        self.exit(None)
