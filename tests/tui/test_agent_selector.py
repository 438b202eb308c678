import threading

import pytest
from textual.widgets import OptionList

from vibe.agents.models import AgentDefinition
from vibe.tui.selector import AgentSelectorApp


def _agents() -> list[AgentDefinition]:
    return [
        AgentDefinition(id="planner", name="Planner", description="Plans"),
        AgentDefinition(id="reviewer", name="Reviewer"),
        AgentDefinition(id="writer", name="Writer"),
    ]


@pytest.mark.asyncio(loop_scope="function")
async def test_enter_selects_highlighted_agent() -> None:
    app = AgentSelectorApp(_agents())

    async with app.run_test() as pilot:
        await pilot.press("down")
        await pilot.press("enter")
        await pilot.pause()

    assert app.return_value == "reviewer"


@pytest.mark.asyncio(loop_scope="function")
async def test_last_selected_agent_is_highlighted() -> None:
    app = AgentSelectorApp(_agents(), selected_id="writer")

    async with app.run_test() as pilot:
        option_list = app.query_one(OptionList)
        assert option_list.highlighted == 2
        assert "(last used)" in str(option_list.get_option_at_index(2).prompt)
        await pilot.press("enter")
        await pilot.pause()

    assert app.return_value == "writer"


@pytest.mark.asyncio(loop_scope="function")
async def test_quit_returns_none() -> None:
    app = AgentSelectorApp(_agents())

    async with app.run_test() as pilot:
        await pilot.press("q")
        await pilot.pause()

    assert app.return_value is None


@pytest.mark.asyncio(loop_scope="function")
async def test_cancel_event_closes_selector() -> None:
    cancel = threading.Event()
    app = AgentSelectorApp(_agents(), cancel=cancel)

    async with app.run_test() as pilot:
        cancel.set()
        await pilot.pause(0.5)

    assert app.return_value is None
