import logging
import os
import signal
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from vibe import __version__
from vibe.agents.context import ContextStore
from vibe.agents.loader import AgentLoader, LoadedAgent
from vibe.agents.registry import AgentRegistry
from vibe.config import AppConfig, AppPaths, ConfigRepository
from vibe.constants import (
    EXIT_AGENT_ERROR,
    EXIT_INIT_ERROR,
    EXIT_OK,
    EXIT_SETUP_ERROR,
    EXIT_USAGE_ERROR,
    TERM_WIDTH_ENV,
)
from vibe.errors import ConfigError, OperationCancelledError, SetupError, VibeError, error_chain
from vibe.log import setup_logging
from vibe.projects.registry import ProjectRegistry
from vibe.rules.importer import ImportService
from vibe.rules.models import CursorRule
from vibe.rules.storage import ConflictPolicy, RuleStorage
from vibe.sync.manager import SyncManager, find_rules_dir
from vibe.tui import VibeConsoleUI
from vibe.tui.selector import AgentSelectorApp

logger = logging.getLogger("vibe.cli")


class CommandError(click.ClickException):
    def __init__(self, message: str, exit_code: int) -> None:
        super().__init__(message)
        self.exit_code = exit_code


@dataclass
class CliState:
    ui: VibeConsoleUI
    paths: AppPaths
    verbose: bool = False
    debug: bool = False

    @property
    def config_repository(self) -> ConfigRepository:
        return ConfigRepository(self.paths)

    def load_config(self) -> AppConfig:
        try:
            return self.config_repository.load()
        except ConfigError as exc:
            raise self.fail(exc, EXIT_SETUP_ERROR)

    def remember_agent(self, agent_id: str) -> None:
        try:
            self.config_repository.update(last_selected_agent=agent_id)
        except (VibeError, OSError) as exc:
            logger.warning("Failed to save last selected agent | agent=%s error=%s", agent_id, exc)

    def fail(self, exc: BaseException, exit_code: int) -> CommandError:
        if self.verbose or self.debug:
            self.ui.render_error(str(exc), error_chain(exc)[1:])
        return CommandError(str(exc), exit_code)


def _console() -> Console:
    width = os.environ.get(TERM_WIDTH_ENV, "").strip()
    if width.isdigit() and int(width) > 0:
        return Console(width=int(width))
    return Console()


def _exit_code_for(exc: VibeError, default: int) -> int:
    if isinstance(exc, (SetupError, ConfigError)):
        return EXIT_SETUP_ERROR
    return default


def _sync_manager(state: CliState, config: AppConfig) -> SyncManager:
    try:
        registry = ProjectRegistry(state.paths.registry_file(config), config)
    except VibeError as exc:
        raise state.fail(exc, EXIT_SETUP_ERROR)
    return SyncManager(config, state.paths, registry=registry)


def _project_registry(state: CliState) -> ProjectRegistry:
    config = state.load_config()
    try:
        return ProjectRegistry(state.paths.registry_file(config), config)
    except VibeError as exc:
        raise state.fail(exc, EXIT_SETUP_ERROR)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-v", "--verbose", is_flag=True, help="Show progress and full error chains.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.version_option(__version__, prog_name="vibe")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """Manage agent definitions across projects."""
    console = _console()
    paths = AppPaths.for_app()
    setup_logging(paths, verbose=verbose, debug=debug)
    ctx.obj = CliState(ui=VibeConsoleUI(console), paths=paths, verbose=verbose, debug=debug)


@cli.command(help="Copy agent definitions into this project and register it.")
@click.pass_obj
def init(state: CliState) -> None:
    config = state.load_config()
    manager = _sync_manager(state, config)
    try:
        result = manager.init()
    except VibeError as exc:
        raise state.fail(exc, _exit_code_for(exc, EXIT_INIT_ERROR))
    state.ui.render_init_result(result)


@cli.command(help="Push this project's definitions to the store and every registered project.")
@click.pass_obj
def merge(state: CliState) -> None:
    config = state.load_config()
    manager = _sync_manager(state, config)
    try:
        result = manager.merge()
    except VibeError as exc:
        raise state.fail(exc, _exit_code_for(exc, EXIT_INIT_ERROR))
    state.ui.render_merge_result(result)
    if result.failure_count:
        raise click.exceptions.Exit(EXIT_INIT_ERROR)


@cli.command(help="Overwrite this project's definitions with the canonical store.")
@click.pass_obj
def sync(state: CliState) -> None:
    config = state.load_config()
    manager = _sync_manager(state, config)
    try:
        copied = manager.sync()
    except VibeError as exc:
        raise state.fail(exc, _exit_code_for(exc, EXIT_INIT_ERROR))
    state.ui.render_sync_result(Path.cwd(), copied)


def _clean_projects(state: CliState) -> None:
    registry = _project_registry(state)
    try:
        removed = registry.clean_projects()
    except VibeError as exc:
        raise state.fail(exc, EXIT_INIT_ERROR)
    state.ui.render_clean_result(removed)


@cli.command(help="Drop registered projects whose directory no longer exists.")
@click.pass_obj
def clean(state: CliState) -> None:
    _clean_projects(state)


@cli.command("import", help="Import rules from a URL or a local file.")
@click.argument("source")
@click.option("--force", is_flag=True, help="Overwrite existing rule files without asking.")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation; keep existing files by renaming.")
@click.pass_obj
def import_rules(state: CliState, source: str, force: bool, yes: bool) -> None:
    config = state.load_config()
    storage = RuleStorage(state.paths.rules_dir(config), config)
    service = ImportService(storage, config)

    def confirm(rules: list[CursorRule]) -> bool:
        state.ui.render_rules_found(rules, source)
        if yes:
            return True
        return click.confirm("Do you want to import these rules?", default=True)

    policy = ConflictPolicy.RENAME if yes else ConflictPolicy.PROMPT
    try:
        result = service.import_rules(source, force=force, confirm=confirm, policy=policy)
    except OperationCancelledError as exc:
        raise state.fail(exc, EXIT_USAGE_ERROR)
    except VibeError as exc:
        raise state.fail(exc, EXIT_INIT_ERROR)
    state.ui.render_import_result(result)


@cli.group(help="Inspect the registered projects.")
def projects() -> None:
    pass


@projects.command("list", help="List registered projects.")
@click.pass_obj
def projects_list(state: CliState) -> None:
    registry = _project_registry(state)
    state.ui.render_projects(registry.projects)


@projects.command("clean", help="Drop registered projects whose directory no longer exists.")
@click.pass_obj
def projects_clean(state: CliState) -> None:
    _clean_projects(state)


def _agent_registry(state: CliState, config: AppConfig) -> Optional[AgentRegistry]:
    rules_dir = find_rules_dir(Path.cwd(), config, state.paths)
    if rules_dir is None:
        state.ui.render_no_agents()
        return None
    logger.debug("Using agent rules directory | path=%s", rules_dir)
    try:
        registry = AgentRegistry(rules_dir, config)
    except VibeError as exc:
        raise state.fail(exc, EXIT_AGENT_ERROR)
    if state.verbose:
        state.ui.render_scan_skips(registry.last_scan)
    return registry


def _agent_loader(state: CliState, registry: AgentRegistry, config: AppConfig) -> AgentLoader:
    return AgentLoader(registry, ContextStore(state.paths.context_dir, config))


@cli.group(invoke_without_command=True, help="List, inspect, select and run agents.")
@click.pass_context
def agent(ctx: click.Context) -> None:
    if ctx.invoked_subcommand is None:
        ctx.invoke(agent_list)


@agent.command("list", help="List available agents.")
@click.pass_obj
def agent_list(state: CliState) -> None:
    config = state.load_config()
    registry = _agent_registry(state, config)
    if registry is None:
        return
    state.ui.render_agents(
        registry.list_agents(),
        selected_id=config.last_selected_agent,
        rules_dir=registry.rules_dir,
    )


@agent.command("info", help="Show one agent by ID, list index or name.")
@click.argument("query")
@click.pass_obj
def agent_info(state: CliState, query: str) -> None:
    config = state.load_config()
    registry = _agent_registry(state, config)
    if registry is None:
        return
    try:
        definition = registry.find(query)
    except VibeError as exc:
        raise state.fail(exc, EXIT_AGENT_ERROR)
    state.ui.render_agent(definition, verbose=state.verbose)


def _select_agent_id(registry: AgentRegistry, config: AppConfig, cancel: threading.Event) -> Optional[str]:
    app = AgentSelectorApp(registry.list_agents(), selected_id=config.last_selected_agent, cancel=cancel)
    return app.run()


@agent.command("select", help="Pick an agent interactively and load it.")
@click.pass_obj
def agent_select(state: CliState) -> None:
    config = state.load_config()
    registry = _agent_registry(state, config)
    if registry is None:
        return
    if not len(registry):
        state.ui.render_no_agents()
        return

    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda *_: cancel.set())
    try:
        selected = _select_agent_id(registry, config, cancel)
        if selected is None or cancel.is_set():
            raise OperationCancelledError("agent selection")
        loaded = _load_agent(state, registry, config, selected, cancel)
    except VibeError as exc:
        raise state.fail(exc, EXIT_AGENT_ERROR)
    finally:
        signal.signal(signal.SIGINT, previous)

    state.ui.render_agent_loaded(loaded.definition)
    state.ui.render_agent(loaded.definition, verbose=state.verbose)


def _load_agent(
    state: CliState,
    registry: AgentRegistry,
    config: AppConfig,
    agent_id: str,
    cancel: Optional[threading.Event] = None,
) -> LoadedAgent:
    loader = _agent_loader(state, registry, config)
    loaded = loader.load(agent_id, cancel=cancel)
    loaded.context.record_execution()
    if loader.contexts is not None:
        try:
            loader.contexts.save(loaded.context)
        except VibeError as exc:
            logger.warning("Failed to save agent context | agent=%s error=%s", agent_id, exc)
    state.remember_agent(loaded.definition.id)
    return loaded


@agent.command("run", help="Load an agent by ID or name and remember it.")
@click.argument("query")
@click.pass_obj
def agent_run(state: CliState, query: str) -> None:
    config = state.load_config()
    registry = _agent_registry(state, config)
    if registry is None:
        return
    try:
        definition = registry.find(query)
        loaded = _load_agent(state, registry, config, definition.id)
    except VibeError as exc:
        raise state.fail(exc, EXIT_AGENT_ERROR)
    state.ui.render_agent_loaded(loaded.definition, action="loaded")


def main() -> int:
    try:
        code = cli(standalone_mode=False)
    except click.exceptions.Exit as exc:
        code = exc.exit_code
        return code if isinstance(code, int) else EXIT_USAGE_ERROR
    except click.UsageError as exc:
        exc.show()
        return EXIT_USAGE_ERROR
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted!", err=True)
        return EXIT_USAGE_ERROR
    return code if isinstance(code, int) else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
