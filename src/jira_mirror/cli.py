"""Command line interface of jira-mirror."""

import logging
import shlex
import subprocess
from functools import cached_property
from pathlib import Path
from typing import NoReturn

import click
from dotenv import dotenv_values

from . import __version__
from .cache import (
    Daemon,
    FileSnapshotStore,
    ForegroundAccessor,
    RefreshOrchestrator,
)
from .editor import STANDUP_KINDS, Editor
from .exceptions import ConfigMissingError, JiraMirrorError, RefreshCancelledError
from .jira import CustomFieldsConfig, JiraConfig, JiraFetcher
from .jira.config import (
    DEFAULT_SPRINT_DURATION,
    DEFAULT_STANDUP_TEMPLATE,
    default_config_path,
)
from .logging_config import DEFAULT_LOGGER_NAME, log_operation, setup_logger
from .output import format_issues, format_sprint_issues, format_sprints
from .utils.env import split_list

logger = logging.getLogger("jira-mirror.cli")

CONFIG_MISSING_MESSAGE = "Configuration is missing. Run jira-mirror configure"


class AppContext:
    """Lazily built collaborators shared by all commands of one invocation."""

    def __init__(
        self,
        config_path: Path | None = None,
        cache_path: Path | None = None,
        log_level: str | None = None,
        log_dir: str | None = None,
    ) -> None:
        self.config_path = config_path or default_config_path()
        self.store = FileSnapshotStore(cache_path)
        self.log_level = log_level
        self.log_dir = log_dir

    @cached_property
    def config(self) -> JiraConfig:
        return JiraConfig.from_file(self.config_path)

    @cached_property
    def client(self) -> JiraFetcher:
        return JiraFetcher(self.config)

    @cached_property
    def accessor(self) -> ForegroundAccessor:
        return ForegroundAccessor(self.store, lambda: self.client)

    def editor(self) -> Editor:
        """Editor working on a fresh snapshot, refreshed synchronously if stale."""
        accessor = self.accessor
        if accessor.is_stale():
            accessor.load_blocking()
        return Editor(accessor.snapshot, accessor.client)


pass_app = click.make_pass_decorator(AppContext)


def fail(message: str) -> NoReturn:
    click.echo(message, err=True)
    raise click.exceptions.Exit(1)


class MirrorGroup(click.Group):
    """Root group turning domain errors into a one-line message and exit code 1."""

    def invoke(self, ctx: click.Context) -> object:
        try:
            return super().invoke(ctx)
        except ConfigMissingError:
            logger.debug("Configuration file missing")
            fail(CONFIG_MISSING_MESSAGE)
        except (JiraMirrorError, ValueError, OSError) as e:
            logger.debug(f"Command failed: {e!r}", exc_info=True)
            fail(str(e))
        return None


@click.group(cls=MirrorGroup)
@click.version_option(__version__, prog_name="jira-mirror")
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (can be used multiple times)",
)
@click.option(
    "--log-dir",
    help="Directory to store log files",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int, log_dir: str | None) -> None:
    """Low-latency Jira workflows backed by a local snapshot."""
    logging_level = None
    if verbose == 1:
        logging_level = "INFO"
    elif verbose >= 2:
        logging_level = "DEBUG"

    setup_logger(
        name=DEFAULT_LOGGER_NAME,
        level=logging_level,
        log_to_file=log_dir is not None,
        log_dir=log_dir,
    )
    ctx.obj = AppContext(log_level=logging_level, log_dir=log_dir)


project_option = click.option(
    "-p", "--project", help="Reference alternative project", default=None
)


@cli.group(invoke_without_command=True)
@project_option
@pass_app
@click.pass_context
def issues(ctx: click.Context, app: AppContext, project: str | None) -> None:
    """List and create issues."""
    if ctx.invoked_subcommand is not None:
        return
    if project:
        items = app.client.list_issues(project)
    else:
        items = app.accessor.get_issues()
    click.echo(format_issues(items), nl=False)


@issues.command("new")
@pass_app
def new_issues(app: AppContext) -> None:
    """Create new issues."""
    key = app.editor().open_new_issue_editor()
    app.accessor.record_last_issue_created(key)


@issues.command("edit")
@click.argument("key")
@pass_app
def edit_issue(app: AppContext, key: str) -> None:
    """Edit the summary and priority of an existing issue."""
    app.editor().open_edit_issue_editor(key)


@cli.group(invoke_without_command=True)
@project_option
@pass_app
@click.pass_context
def epics(ctx: click.Context, app: AppContext, project: str | None) -> None:
    """List and create epics."""
    if ctx.invoked_subcommand is not None:
        return
    if project:
        items = app.client.list_epics(project)
    else:
        items = app.accessor.get_epics()
    click.echo(format_issues(items), nl=False)


@epics.command("new")
@pass_app
def new_epics(app: AppContext) -> None:
    """Create new epics."""
    key = app.editor().open_epic_editor()
    app.accessor.record_last_issue_created(key)


@cli.command()
@project_option
@pass_app
def initiatives(app: AppContext, project: str | None) -> None:
    """List initiatives."""
    if project:
        items = app.client.list_initiatives(project)
    else:
        items = app.accessor.get_initiatives()
    click.echo(format_issues(items), nl=False)


@cli.group(invoke_without_command=True)
@project_option
@pass_app
@click.pass_context
def sprints(ctx: click.Context, app: AppContext, project: str | None) -> None:
    """List and create sprints."""
    if ctx.invoked_subcommand is not None:
        return
    if project:
        board_id = app.client.get_board_id(project)
        items = app.client.list_sprints(board_id, keyword="")
    else:
        items = app.accessor.get_sprints()
    click.echo(format_sprints(items), nl=False)


def parse_month_day(value: str) -> tuple[int, int]:
    """Parse ``MM/DD`` into month and day numbers."""
    parts = value.split("/")
    if len(parts) != 2:
        raise click.UsageError("requires month and day")
    try:
        month = int(parts[0])
    except ValueError:
        raise click.UsageError("month has to be numeric") from None
    try:
        day = int(parts[1])
    except ValueError:
        raise click.UsageError("day has to be numeric") from None
    return month, day


@sprints.command("new")
@click.argument("name")
@click.argument("date", metavar="MM/DD")
@pass_app
def new_sprint(app: AppContext, name: str, date: str) -> None:
    """Create a new sprint starting on MM/DD."""
    month, day = parse_month_day(date)
    board_id = app.accessor.get_board_id()
    sprint = app.client.create_sprint(name, month, day, board_id)
    click.echo(f"Created sprint {sprint.id} - {sprint.name}")


all_option = click.option(
    "-a", "--all", "include_done", is_flag=True, help="Include issues that are done"
)


@cli.group(invoke_without_command=True)
@all_option
@pass_app
@click.pass_context
def sprint(ctx: click.Context, app: AppContext, include_done: bool) -> None:
    """List issues in the current sprint."""
    ctx.meta["include_done"] = include_done
    if ctx.invoked_subcommand is not None:
        return
    items = app.accessor.get_sprint_issues()
    click.echo(format_sprint_issues(items, include_done), nl=False)


@sprint.command("edit")
@all_option
@pass_app
@click.pass_context
def edit_sprint(ctx: click.Context, app: AppContext, include_done: bool) -> None:
    """Update sprint board issue progress."""
    include_done = include_done or ctx.meta.get("include_done", False)
    app.editor().open_sprint_editor(include_done)


@cli.command()
@click.argument("kind", type=click.Choice(STANDUP_KINDS))
@pass_app
def standup(app: AppContext, kind: str) -> None:
    """Write a standup message from the sprint issues or the epics."""
    if kind == "sprint":
        template = app.config.sprint_standup_template
    else:
        template = app.config.epic_standup_template

    text = app.editor().open_standup_editor(kind, template)
    if not text:
        logger.info("Empty standup message, nothing to copy")
        return

    command = app.config.copy_command
    if not command:
        click.echo(text, nl=False)
        return

    result = subprocess.run(
        shlex.split(command), input=text, capture_output=True, text=True, check=False
    )
    if result.returncode != 0:
        output = (result.stdout + result.stderr).strip()
        fail(output or f"{command} failed with exit code {result.returncode}")
    click.echo("Standup message copied", err=True)


@cli.command()
@pass_app
def daemon(app: AppContext) -> None:
    """Run the background refresh process."""
    daemon_logger = setup_logger(
        name=DEFAULT_LOGGER_NAME,
        level=app.log_level or "INFO",
        log_to_file=True,
        log_dir=app.log_dir,
    )

    orchestrator = RefreshOrchestrator(app.client)
    with log_operation(daemon_logger, "daemon", project=orchestrator.project):
        try:
            Daemon(orchestrator, app.store).run()
        except (KeyboardInterrupt, RefreshCancelledError):
            logger.info("Daemon stopped")


@cli.command()
@pass_app
def branch(app: AppContext) -> None:
    """Create a git branch named after the most recently created issue key."""
    key = app.store.load().last_issue_created
    if not key:
        fail("no recently created issue")

    result = subprocess.run(
        ["git", "checkout", "-b", key], capture_output=True, text=True, check=False
    )
    output = (result.stdout + result.stderr).strip()
    if result.returncode != 0:
        fail(output or f"git checkout failed with exit code {result.returncode}")
    if output:
        click.echo(output, err=True)


def _prompt(label: str, current: str | None, hide_input: bool = False) -> str:
    return click.prompt(
        label, default=current or "", show_default=not hide_input, hide_input=hide_input
    ).strip()


@cli.command()
@pass_app
def configure(app: AppContext) -> None:
    """Write the configuration file interactively."""
    current: dict[str, str | None] = {}
    if app.config_path.exists():
        current = dotenv_values(app.config_path)

    click.echo("Configure Jira using basic authentication.")
    url = _prompt("Endpoint", current.get("JIRA_URL"))
    username = _prompt("Username", current.get("JIRA_USERNAME"))
    api_token = _prompt("API token", current.get("JIRA_API_TOKEN"), hide_input=True)
    project = _prompt("Project", current.get("JIRA_PROJECT"))
    issue_type = _prompt("Issue Type", current.get("JIRA_ISSUE_TYPE"))
    labels = _prompt("Labels (comma separated)", current.get("JIRA_LABELS"))
    components = _prompt("Components (comma separated)", current.get("JIRA_COMPONENTS"))
    sprint_keyword = _prompt("Sprint Keyword", current.get("JIRA_SPRINT_KEYWORD"))
    sprint_duration = click.prompt(
        "Sprint Duration (days)",
        default=int(current.get("JIRA_SPRINT_DURATION") or DEFAULT_SPRINT_DURATION),
        type=int,
    )
    epics_field = _prompt("Epic Field", current.get("JIRA_EPICS_FIELD"))
    sprints_field = _prompt("Sprint Field", current.get("JIRA_SPRINTS_FIELD"))
    story_points_field = _prompt(
        "Story Points Field", current.get("JIRA_STORY_POINTS_FIELD")
    )
    epic_name_field = _prompt("Epic Name Field", current.get("JIRA_EPIC_NAME_FIELD"))
    parent_link_field = _prompt(
        "Parent Link Field", current.get("JIRA_PARENT_LINK_FIELD")
    )
    sprint_standup_template = _prompt(
        "Sprint Standup Row",
        current.get("JIRA_SPRINT_STANDUP_TEMPLATE") or DEFAULT_STANDUP_TEMPLATE,
    )
    epic_standup_template = _prompt(
        "Epic Standup Row",
        current.get("JIRA_EPIC_STANDUP_TEMPLATE") or DEFAULT_STANDUP_TEMPLATE,
    )
    copy_command = _prompt("Copy Command", current.get("JIRA_COPY_COMMAND"))

    config = JiraConfig(
        url=url,
        username=username,
        api_token=api_token,
        project=project,
        issue_type=issue_type,
        custom_fields=CustomFieldsConfig(
            epics_field=epics_field,
            sprints_field=sprints_field,
            story_points_field=story_points_field,
            epic_name_field=epic_name_field or None,
            parent_link_field=parent_link_field or None,
        ),
        labels=split_list(labels),
        components=split_list(components),
        sprint_keyword=sprint_keyword,
        sprint_duration=sprint_duration,
        sprint_standup_template=sprint_standup_template or DEFAULT_STANDUP_TEMPLATE,
        epic_standup_template=epic_standup_template or DEFAULT_STANDUP_TEMPLATE,
        copy_command=copy_command,
    )
    # validates required keys before anything is written
    JiraConfig.from_values(dict(config.to_values()))
    path = config.write(app.config_path)
    click.echo(f"Configuration written to {path}")


def main() -> None:
    cli(prog_name="jira-mirror")
