from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from vibe.agents.models import AgentDefinition, ScanResult
from vibe.rules.importer import ImportResult
from vibe.rules.models import CursorRule
from vibe.sync.manager import InitResult, MergeResult
from vibe.tui.enums import UIStyle
from vibe.tui.sections import UISection
from vibe.tui.tables import AgentTable, MergeTable, ProjectTable, RuleTable
from vibe.utils import compact_home_path


class VibeConsoleUI:
    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def render_init_result(self, result: InitResult) -> None:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Project", compact_home_path(result.project_dir))
        table.add_row("Rules", compact_home_path(result.target_dir))
        table.add_row("Copied", f"{result.copied} definitions")
        table.add_row("Setup", "cloned default repository" if result.setup_performed else "not needed")
        table.add_row("Registry", "registered" if result.registered else "already registered")
        self.console.print(UISection.wrap("init", table, style=UIStyle.GREEN.value))

    def render_sync_result(self, project_dir: Path, copied: int) -> None:
        self.console.print(
            UISection.note(
                "sync",
                f"Synced [bold]{copied}[/bold] definitions into {project_dir}",
                style=UIStyle.GREEN.value,
            )
        )

    def render_merge_result(self, result: MergeResult) -> None:
        self.console.print(MergeTable.stats_panel(result))
        if result.failed:
            self.console.print(
                UISection.bullets(
                    "failures",
                    [f"{path}: {reason}" for path, reason in result.failed.items()],
                    style=UIStyle.RED.value,
                )
            )

    def render_clean_result(self, removed: int) -> None:
        style = UIStyle.YELLOW.value if removed else UIStyle.DIM.value
        noun = "project" if removed == 1 else "projects"
        self.console.print(
            UISection.note("clean", f"Removed {removed} missing {noun} from the registry.", style=style)
        )

    def render_projects(self, projects: list[str]) -> None:
        if not projects:
            self.console.print(
                UISection.note(
                    "projects",
                    "No projects registered.\nRun `vibe init` inside a project directory.",
                    style=UIStyle.YELLOW.value,
                )
            )
            return
        self.console.print(
            UISection.wrap("projects", ProjectTable.projects_table(projects), style=UIStyle.BLUE.value)
        )

    def render_rules_found(self, rules: list[CursorRule], source: str) -> None:
        self.console.print(
            UISection.wrap(
                f"found {len(rules)} rules",
                RuleTable.rules_table(rules),
                style=UIStyle.CYAN.value,
                subtitle=source,
            )
        )

    def render_import_result(self, result: ImportResult) -> None:
        lines = [
            f"Saved [bold]{result.canonical.saved_count}[/bold] rules to the canonical store.",
        ]
        if result.canonical.skipped:
            lines.append(f"Skipped existing: {', '.join(result.canonical.skipped)}")
        if result.project is not None:
            lines.append(f"Also saved {result.project.saved_count} rules to the current project.")
        self.console.print(UISection.note("import", "\n".join(lines), style=UIStyle.GREEN.value))
        if result.project_error:
            self.console.print(
                UISection.note("project copy", result.project_error, style=UIStyle.YELLOW.value)
            )

    def render_agents(self, agents: list[AgentDefinition], selected_id: str = "", rules_dir: Optional[Path] = None) -> None:
        if not agents:
            self.render_no_agents()
            return
        subtitle = compact_home_path(rules_dir) if rules_dir is not None else None
        self.console.print(
            UISection.wrap(
                "agents",
                AgentTable.list_table(agents, selected_id=selected_id),
                style=UIStyle.BLUE.value,
                subtitle=subtitle,
            )
        )

    def render_agent(self, agent: AgentDefinition, verbose: bool = False) -> None:
        self.console.print(
            UISection.wrap(
                f"agent: {agent.name}",
                AgentTable.detail_block(agent, verbose=verbose),
                style=UIStyle.CYAN.value,
            )
        )

    def render_agent_loaded(self, agent: AgentDefinition, action: str = "selected and loaded") -> None:
        self.console.print(
            UISection.note(
                "agent",
                f"Agent [bold]{agent.name}[/bold] ({agent.id}) {action}.",
                style=UIStyle.GREEN.value,
            )
        )

    def render_scan_skips(self, scan: ScanResult) -> None:
        if not scan.skipped:
            return
        self.console.print(
            UISection.bullets(
                "skipped definitions",
                [f"{entry.path.name}: {entry.reason}" for entry in scan.skipped],
                style=UIStyle.YELLOW.value,
            )
        )

    def render_no_agents(self) -> None:
        self.console.print(
            UISection.note(
                "agents",
                "No local or system agent definitions found.\n"
                "Run `vibe init` to initialize the agent system in this directory.",
                style=UIStyle.YELLOW.value,
            )
        )

    def render_error(self, message: str, details: Optional[list[str]] = None) -> None:
        self.console.print(UISection.note("error", message, style=UIStyle.RED.value))
        if details:
            self.console.print(UISection.bullets("cause chain", details, style=UIStyle.DIM.value))
