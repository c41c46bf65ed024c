"""Defines the Command Line Interface (CLI) using Typer."""

from contextlib import contextmanager
from typing import Iterator

import typer
from dotenv import load_dotenv
from typer import Argument, Option
from typing_extensions import Annotated

from sprint_ops_manager.configuration.env import settings
from sprint_ops_manager.configuration.exceptions import (
    JiraAuthenticationConfigurationUndefinedError,
    RequiredConfigurationElementError,
)
from sprint_ops_manager.configuration.models import JiraSearchApi, SprintConfig
from sprint_ops_manager.configuration.reconcile import (
    reconcile_connection_configuration,
    reconcile_sprint_configuration,
)
from sprint_ops_manager.jira.abc import JiraClientBase
from sprint_ops_manager.jira.adapter import JiraRestAdapter
from sprint_ops_manager.jira.exceptions import JiraError
from sprint_ops_manager.schemas.jira import Board, Sprint, SprintState
from sprint_ops_manager.sprints import (
    create_next_sprint,
    delete_sprint,
    fetch_all_sprints,
    filter_project_sprints,
    get_active_sprint,
    get_board_id,
    get_latest_passed_sprint,
    get_nearest_future_sprint,
    move_issues_to_sprint,
    query_issues,
    rename_sprint,
    rotate_sprint,
    update_sprint_dates,
    update_sprint_state,
)
from sprint_ops_manager.utils.constants import ISSUE_SEARCH_MAX_RESULTS
from sprint_ops_manager.utils.helpers import parse_instant
from sprint_ops_manager.utils.log import configure_logging

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False, help="Automate weekly sprints on a Jira Software board.")


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Report configuration and Jira errors on stderr and exit with status 1."""
    try:
        yield
    except (JiraError, RequiredConfigurationElementError, JiraAuthenticationConfigurationUndefinedError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


def format_sprint(sprint: Sprint) -> str:
    """Render a sprint as one tab-separated line."""
    start = sprint.start_date.isoformat() if sprint.start_date else "-"
    end = sprint.end_date.isoformat() if sprint.end_date else "-"
    return f"{sprint.id}\t{sprint.state.value}\t{sprint.name}\t{start}\t{end}"


def format_board(board: Board) -> str:
    """Render a board as one tab-separated line."""
    return f"{board.id}\t{board.type or '-'}\t{board.name or '-'}"


def get_client(ctx: typer.Context) -> JiraClientBase:
    """Build the Jira client from the options collected by the main callback."""
    connection = reconcile_connection_configuration(
        cli_jira_url=ctx.obj["jira_url"],
        cli_jira_email=ctx.obj["jira_email"],
        cli_jira_api_token=ctx.obj["jira_api_token"],
        cli_jira_pat_token=ctx.obj["jira_pat_token"],
        cli_jira_timeout=ctx.obj["jira_timeout"],
        cli_jira_search_api=ctx.obj["jira_search_api"],
    )
    return JiraRestAdapter.create(connection)


def get_sprint_config(ctx: typer.Context) -> SprintConfig:
    """Build the project configuration from the options collected by the main callback."""
    return reconcile_sprint_configuration(
        cli_project=ctx.obj["project"],
        cli_board_type=ctx.obj["board_type"],
        cli_board_id=ctx.obj["board_id"],
    )


def resolve_board_id(client: JiraClientBase, config: SprintConfig) -> int:
    """Use the configured board ID, or look up the project's first board of the configured type."""
    if config.board_id is not None:
        return config.board_id
    return get_board_id(client, config.project, config.board_type)


@typer_app.callback()
def main_callback(
    ctx: typer.Context,
    project: Annotated[str | None, Option(envvar="JIRA_PROJECT", help="Jira project key, also expected in every sprint name.")] = None,
    board_type: Annotated[str | None, Option(envvar="JIRA_BOARD_TYPE", help="Board type to look up (scrum, kanban).")] = None,
    board_id: Annotated[int | None, Option(envvar="JIRA_BOARD_ID", help="Board ID. Skips the board lookup when set.")] = None,
    jira_url: Annotated[str | None, Option(envvar="JIRA_URL", help="Jira base URL.")] = None,
    jira_email: Annotated[str | None, Option(envvar="JIRA_EMAIL", help="Jira account email (basic authentication).")] = None,
    jira_api_token: Annotated[str | None, Option(envvar="JIRA_API_TOKEN", help="Jira API token (basic authentication).")] = None,
    jira_pat_token: Annotated[str | None, Option(envvar="JIRA_PAT_TOKEN", help="Jira personal access token.")] = None,
    jira_timeout: Annotated[float | None, Option(envvar="JIRA_TIMEOUT", help="Per-request timeout in seconds.")] = None,
    jira_search_api: Annotated[
        JiraSearchApi | None,
        Option(envvar="JIRA_SEARCH_API", help="JQL search API: offset (Server, Data Center) or token (Cloud)."),
    ] = None,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug logging.")] = False,
) -> None:
    """Collect connection and project options for the sub-commands."""
    configure_logging(debug or settings.DEBUG)
    ctx.ensure_object(dict)
    ctx.obj["project"] = project
    ctx.obj["board_type"] = board_type
    ctx.obj["board_id"] = board_id
    ctx.obj["jira_url"] = jira_url
    ctx.obj["jira_email"] = jira_email
    ctx.obj["jira_api_token"] = jira_api_token
    ctx.obj["jira_pat_token"] = jira_pat_token
    ctx.obj["jira_timeout"] = jira_timeout
    ctx.obj["jira_search_api"] = jira_search_api


@typer_app.command(name="boards")
def boards_cli(ctx: typer.Context) -> None:
    """List the project's boards of the configured type."""
    with exit_on_error():
        client = get_client(ctx)
        config = get_sprint_config(ctx)
        boards = client.list_boards(config.project, board_type=config.board_type)
    if not boards:
        typer.echo(f"No {config.board_type} boards found for project {config.project}.")
        return
    for board in boards:
        typer.echo(format_board(board))


@typer_app.command(name="sprints")
def sprints_cli(
    ctx: typer.Context,
    state: Annotated[SprintState | None, Option("--state", help="Only list sprints in this state.")] = None,
) -> None:
    """List the project's sprints on the board."""
    with exit_on_error():
        client = get_client(ctx)
        config = get_sprint_config(ctx)
        board_id = resolve_board_id(client, config)
        sprints = filter_project_sprints(fetch_all_sprints(client, board_id, state=state), config.project)
    for sprint in sprints:
        typer.echo(format_sprint(sprint))


@typer_app.command(name="active")
def active_cli(ctx: typer.Context) -> None:
    """Show the active sprint."""
    with exit_on_error():
        client = get_client(ctx)
        config = get_sprint_config(ctx)
        sprint = get_active_sprint(client, resolve_board_id(client, config), config.project)
    typer.echo(format_sprint(sprint))


@typer_app.command(name="latest-passed")
def latest_passed_cli(ctx: typer.Context) -> None:
    """Show the project's sprint that ended most recently, within the last week."""
    with exit_on_error():
        client = get_client(ctx)
        config = get_sprint_config(ctx)
        sprints = fetch_all_sprints(client, resolve_board_id(client, config))
    sprint = get_latest_passed_sprint(sprints, config.project)
    if sprint is None:
        typer.echo("No sprint ended within the last week.")
        return
    typer.echo(format_sprint(sprint))


@typer_app.command(name="nearest-future")
def nearest_future_cli(ctx: typer.Context) -> None:
    """Show the project's running sprint, or the one starting soonest within the next week."""
    with exit_on_error():
        client = get_client(ctx)
        config = get_sprint_config(ctx)
        sprints = fetch_all_sprints(client, resolve_board_id(client, config))
    sprint = get_nearest_future_sprint(sprints, config.project)
    if sprint is None:
        typer.echo("No sprint running or starting within the next week.")
        return
    typer.echo(format_sprint(sprint))


@typer_app.command(name="create-next")
def create_next_cli(
    ctx: typer.Context,
    start: Annotated[
        str | None,
        Option("--start", help="Start instant with offset, e.g. 2018-10-05T00:00:00+08:00. Defaults to the active sprint's end."),
    ] = None,
) -> None:
    """Create the next weekly sprint, or reuse it if it already exists."""
    with exit_on_error():
        client = get_client(ctx)
        config = get_sprint_config(ctx)
        board_id = resolve_board_id(client, config)
        if start is not None:
            start_date = parse_instant(start)
        else:
            active = get_active_sprint(client, board_id, config.project)
            if active.end_date is None:
                raise ValueError(f"Active sprint {active.id} has no end date, pass --start explicitly")
            start_date = active.end_date
        sprint = create_next_sprint(client, board_id, config.project, start_date)
    typer.echo(format_sprint(sprint))


@typer_app.command(name="delete")
def delete_cli(
    ctx: typer.Context,
    sprint_id: Annotated[int, Argument(help="ID of the sprint to delete.")],
) -> None:
    """Delete a sprint."""
    with exit_on_error():
        delete_sprint(get_client(ctx), sprint_id)
    typer.echo(f"Deleted sprint {sprint_id}")


@typer_app.command(name="start")
def start_cli(
    ctx: typer.Context,
    sprint_id: Annotated[int, Argument(help="ID of the sprint to start.")],
) -> None:
    """Start a future sprint."""
    with exit_on_error():
        sprint = update_sprint_state(get_client(ctx), sprint_id, SprintState.ACTIVE)
    typer.echo(format_sprint(sprint))


@typer_app.command(name="close")
def close_cli(
    ctx: typer.Context,
    sprint_id: Annotated[int, Argument(help="ID of the sprint to close.")],
) -> None:
    """Close an active sprint."""
    with exit_on_error():
        sprint = update_sprint_state(get_client(ctx), sprint_id, SprintState.CLOSED)
    typer.echo(format_sprint(sprint))


@typer_app.command(name="rename")
def rename_cli(
    ctx: typer.Context,
    sprint_id: Annotated[int, Argument(help="ID of the sprint to rename.")],
    name: Annotated[str, Argument(help="New sprint name.")],
) -> None:
    """Rename a sprint."""
    with exit_on_error():
        sprint = rename_sprint(get_client(ctx), sprint_id, name)
    typer.echo(format_sprint(sprint))


@typer_app.command(name="reschedule")
def reschedule_cli(
    ctx: typer.Context,
    sprint_id: Annotated[int, Argument(help="ID of the sprint to reschedule.")],
    start: Annotated[str, Argument(help="New start instant with offset.")],
    end: Annotated[str, Argument(help="New end instant with offset.")],
) -> None:
    """Move a sprint to a new date window."""
    with exit_on_error():
        sprint = update_sprint_dates(get_client(ctx), sprint_id, parse_instant(start), parse_instant(end))
    typer.echo(format_sprint(sprint))


@typer_app.command(name="move-issues")
def move_issues_cli(
    ctx: typer.Context,
    sprint_id: Annotated[int, Argument(help="ID of the target sprint.")],
    jql: Annotated[str, Argument(help="JQL query selecting the issues to move.")],
    max_results: Annotated[int, Option("--max-results", help="Maximum number of issues to move.")] = ISSUE_SEARCH_MAX_RESULTS,
) -> None:
    """Move the issues matching a JQL query into a sprint, 50 at a time."""
    with exit_on_error():
        client = get_client(ctx)
        issues = query_issues(client, jql, max_results=max_results)
        moved = move_issues_to_sprint(client, sprint_id, issues)
    typer.echo(f"Moved {moved} issue(s) to sprint {sprint_id}")


@typer_app.command(name="rotate")
def rotate_cli(
    ctx: typer.Context,
    dry_run: Annotated[bool, Option("--dry-run", help="Only report what the rotation would do.")] = False,
) -> None:
    """Close the active sprint and start the next one, carrying over unresolved issues."""
    with exit_on_error():
        client = get_client(ctx)
        config = get_sprint_config(ctx)
        result = rotate_sprint(client, config, resolve_board_id(client, config), dry_run=dry_run)

    if result.dry_run:
        existing = "existing" if result.next_sprint is not None else "new"
        typer.echo(f"Would close sprint {result.closed_sprint.id} ({result.closed_sprint.name})")
        typer.echo(f"Would start {existing} sprint '{result.next_sprint_name}'")
        typer.echo(f"Would move {result.issues_moved} unresolved issue(s)")
        return

    typer.echo(f"Closed sprint {result.closed_sprint.id} ({result.closed_sprint.name})")
    if result.next_sprint is not None:
        typer.echo(f"Started sprint {result.next_sprint.id} ({result.next_sprint.name})")
    typer.echo(f"Moved {result.issues_moved} unresolved issue(s)")


if __name__ == "__main__":
    typer_app()
