from pathlib import Path

from rich.panel import Panel
from rich.table import Column, Table

from vibe.agents.models import AgentDefinition
from vibe.rules.models import CursorRule
from vibe.sync.manager import MergeResult
from vibe.tui.enums import UIStyle
from vibe.utils import compact_home_path


class AgentTable:
    @staticmethod
    def list_table(agents: list[AgentDefinition], selected_id: str = "") -> Table:
        table = Table(
            Column(header="#", width=4, justify="right"),
            Column(header="ID", width=28, overflow="ellipsis"),
            Column(header="Name", width=30, overflow="ellipsis"),
            Column(header="Description", overflow="ellipsis"),
            Column(header="Templates", width=10, justify="right"),
            expand=True,
            header_style="bold",
        )
        for index, agent in enumerate(agents, start=1):
            agent_id = agent.id
            if agent.id == selected_id:
                agent_id = f"[{UIStyle.GREEN.value}]{agent.id} *[/{UIStyle.GREEN.value}]"
            table.add_row(
                str(index),
                agent_id,
                agent.name,
                agent.description or f"[{UIStyle.DIM.value}]-[/{UIStyle.DIM.value}]",
                str(len(agent.templates)),
            )
        return table

    @staticmethod
    def detail_block(agent: AgentDefinition, verbose: bool = False) -> Table:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("ID", agent.id)
        table.add_row("Name", agent.name)
        table.add_row("Description", agent.description or "No description available")
        table.add_row("Version", agent.version)
        table.add_row("Type", agent.type)
        table.add_row("Templates", ", ".join(agent.templates) if agent.templates else "none")
        if verbose:
            if agent.definition_path is not None:
                table.add_row("Definition", compact_home_path(agent.definition_path))
            table.add_row("Loaded", agent.last_updated.strftime("%Y-%m-%d %H:%M:%S"))
        return table


class ProjectTable:
    @staticmethod
    def projects_table(projects: list[str]) -> Table:
        table = Table(
            Column(header="#", width=4, justify="right"),
            Column(header="Project", overflow="ellipsis"),
            Column(header="Status", width=10),
            expand=True,
            header_style="bold",
        )
        for index, project in enumerate(projects, start=1):
            exists = Path(project).is_dir()
            style = UIStyle.GREEN.value if exists else UIStyle.RED.value
            status = "ok" if exists else "missing"
            table.add_row(str(index), compact_home_path(project), f"[{style}]{status}[/{style}]")
        return table


class RuleTable:
    @staticmethod
    def rules_table(rules: list[CursorRule]) -> Table:
        table = Table(
            Column(header="#", width=4, justify="right"),
            Column(header="Name", width=32, overflow="ellipsis"),
            Column(header="Description", overflow="ellipsis"),
            Column(header="Author", width=22, overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for index, rule in enumerate(rules, start=1):
            table.add_row(str(index), rule.name, rule.metadata.description, rule.metadata.author)
        return table


class MergeTable:
    @staticmethod
    def stats_panel(result: MergeResult) -> Panel:
        stats: dict[str, str] = {
            "canonical": f"{result.copied_to_canonical} files",
            "succeeded": str(result.success_count),
            "failed": str(result.failure_count),
        }
        table = Table(show_header=False, box=None)
        for key, value in stats.items():
            table.add_row(f"[bold]{key}[/bold]", value)
        return Panel(
            table,
            title="merge",
            border_style=UIStyle.GREEN.value if result.failure_count == 0 else UIStyle.RED.value,
        )
