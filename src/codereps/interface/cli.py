"""codereps CLI: scheduling, solve recording, queue and config commands."""

import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer

from codereps.application.config import AppConfig, resolve_config
from codereps.application.factory import get_solve_service
from codereps.application.scheduler import compute_next_review
from codereps.application.utils.dates import (
    format_date,
    format_display_date,
    format_relative_date,
)
from codereps.domain.errors import CoderepsError, InvalidRatingError
from codereps.domain.models import (
    PersonalDifficulty,
    QueueFilters,
    QueueItem,
    QueueStats,
    ReviewState,
    SolveCreate,
)

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="codereps: spaced-repetition review queue for coding-interview practice.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage codereps configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]

RATING_HELP = "Recall rating: 1-5 or trivial, easy, medium, hard, impossible."

DataFileOption = Annotated[
    Path | None, typer.Option("--data-file", help="YAML file holding problems and solves.")
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def humanize_error(e: Exception) -> str:
    """Turn domain errors into a single user-facing line."""
    if isinstance(e, InvalidRatingError):
        return f"{e}."
    if isinstance(e, CoderepsError):
        return str(e)
    return f"Unexpected error: {e}"


def _fail(e: Exception) -> NoReturn:
    logger.debug("Command failed", exc_info=e)
    typer.secho(f"Error: {humanize_error(e)}", fg="red", err=True)
    raise typer.Exit(2 if isinstance(e, InvalidRatingError) else 1)


def _parse_rating(value: str) -> PersonalDifficulty:
    try:
        return PersonalDifficulty.parse(value)
    except InvalidRatingError as e:
        _fail(e)


def _state_to_dict(state: ReviewState) -> dict[str, Any]:
    return {
        "easiness_factor": round(state.easiness_factor, 4),
        "interval": state.interval,
        "repetition": state.repetition,
        "next_review_date": state.next_review_date.isoformat(),
    }


def _item_to_dict(item: QueueItem) -> dict[str, Any]:
    return {
        "problem_id": item.problem.id,
        "title": item.problem.title,
        "next_review_date": item.next_review_date.isoformat(),
        "days_until_due": item.days_until_due,
        "is_overdue": item.is_overdue,
        "last_solve_id": item.last_solve.id,
        **{k: v for k, v in _state_to_dict(item.review_state).items() if k != "next_review_date"},
    }


def _stats_to_dict(stats: QueueStats) -> dict[str, int]:
    return {
        "overdue_count": stats.overdue_count,
        "due_today_count": stats.due_today_count,
        "due_this_week_count": stats.due_this_week_count,
        "total_problems": stats.total_problems,
    }


def _echo_stats(stats: QueueStats) -> None:
    typer.echo(f"Overdue: {stats.overdue_count}")
    typer.echo(f"Due today: {stats.due_today_count}")
    typer.echo(f"Due this week: {stats.due_this_week_count}")
    typer.echo(f"Total problems: {stats.total_problems}")


def _configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        logging.getLogger().setLevel(logging.DEBUG)
    elif verbosity == 1:
        logging.getLogger().setLevel(logging.INFO)
    else:
        logging.getLogger().setLevel(logging.WARNING)


def _load_config(ctx: typer.Context, **overrides: Any) -> AppConfig:
    """Resolve config with CLI overrides; `-v` on the command line beats `verbose`."""
    verbose = (ctx.obj or {}).get("verbose") or None
    config = resolve_config({**overrides, "verbose": verbose})
    _configure_logging(config.verbose)
    return config


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for codereps."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def schedule(
    rating: Annotated[str, typer.Argument(help=RATING_HELP)],
    ef: Annotated[
        float | None, typer.Option("--ef", help="Prior easiness factor.")
    ] = None,
    interval: Annotated[int, typer.Option(help="Prior interval in days.")] = 0,
    repetition: Annotated[int, typer.Option(help="Prior repetition count.")] = 0,
    date: Annotated[
        datetime | None, typer.Option("--date", formats=DATE_FORMATS, help="Solve date.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Compute the next review for a rating without recording anything."""
    parsed = _parse_rating(rating)

    prior = None
    if ef is not None or interval or repetition:
        prior = ReviewState(
            easiness_factor=ef if ef is not None else 2.5,
            interval=interval,
            repetition=repetition,
            next_review_date=date or datetime.now(),
        )

    state = compute_next_review(parsed, prior, date)

    if json_output:
        typer.echo(json.dumps(_state_to_dict(state), indent=2))
        return

    typer.echo(f"Rating: {parsed.label} ({parsed.description})")
    typer.echo(f"Easiness factor: {state.easiness_factor:.2f}")
    typer.echo(f"Interval: {state.interval} day(s)")
    typer.echo(f"Repetition: {state.repetition}")
    typer.echo(f"Next review: {format_display_date(state.next_review_date)}")


@app.command()
def record(
    ctx: typer.Context,
    problem_id: Annotated[str, typer.Argument(help="Problem ID from the data file.")],
    rating: Annotated[str, typer.Argument(help=RATING_HELP)],
    date: Annotated[
        datetime | None, typer.Option("--date", formats=DATE_FORMATS, help="Solve date.")
    ] = None,
    time_complexity: Annotated[str, typer.Option("--time", help="Time complexity.")] = "",
    space_complexity: Annotated[str, typer.Option("--space", help="Space complexity.")] = "",
    notes: Annotated[str | None, typer.Option(help="Free-text notes.")] = None,
    data_file: DataFileOption = None,
):
    """[bold green]Record[/bold green] a solve and schedule the next review."""
    parsed = _parse_rating(rating)
    config = _load_config(ctx, data_file=data_file)

    async def run():
        service = get_solve_service(config)
        return await service.record_solve(
            SolveCreate(
                problem_id=problem_id,
                personal_difficulty=parsed,
                solved_at=date,
                time_complexity=time_complexity,
                space_complexity=space_complexity,
                notes=notes,
            )
        )

    try:
        solve = asyncio.run(run())
    except CoderepsError as e:
        _fail(e)

    typer.secho(
        f"Recorded {parsed.label} solve for {problem_id}. "
        f"Next review {format_display_date(solve.next_review_date)} "
        f"(in {solve.interval} day(s)).",
        fg="green",
    )


@app.command("queue")
def queue(
    ctx: typer.Context,
    overdue: Annotated[bool, typer.Option("--overdue", help="Only overdue problems.")] = False,
    upcoming: Annotated[
        bool, typer.Option("--upcoming", help="Only problems not yet overdue.")
    ] = False,
    days_ahead: Annotated[
        int | None,
        typer.Option(help="Limit upcoming problems to this many days ahead."),
    ] = None,
    stats: Annotated[bool, typer.Option("--stats", help="Include queue statistics.")] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
    data_file: DataFileOption = None,
):
    """List problems due for review, most overdue first."""
    config = _load_config(ctx, data_file=data_file)
    if upcoming and not overdue and days_ahead is None:
        days_ahead = config.default_days_ahead
    filters = QueueFilters(show_overdue=overdue, show_upcoming=upcoming, days_ahead=days_ahead)

    async def run():
        service = get_solve_service(config)
        items = await service.get_queue(filters)
        queue_stats = await service.get_queue_stats() if stats else None
        return items, queue_stats

    try:
        items, queue_stats = asyncio.run(run())
    except CoderepsError as e:
        _fail(e)

    if json_output:
        payload: dict[str, Any] = {"items": [_item_to_dict(i) for i in items]}
        if queue_stats is not None:
            payload["stats"] = _stats_to_dict(queue_stats)
        typer.echo(json.dumps(payload, indent=2))
        return

    if not items:
        typer.secho("Nothing in the review queue.", fg="yellow")
    now = datetime.now()
    for item in items:
        when = format_relative_date(item.next_review_date, now)
        line = (
            f"{item.problem.id}  {item.problem.title}  "
            f"due {format_date(item.next_review_date)} [{when}]"
        )
        typer.secho(line, fg="red" if item.is_overdue else None)

    if queue_stats is not None:
        typer.echo("")
        _echo_stats(queue_stats)


@app.command("stats")
def stats_command(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
    data_file: DataFileOption = None,
):
    """Show overdue, due-today and due-this-week counts."""
    config = _load_config(ctx, data_file=data_file)

    try:
        queue_stats = asyncio.run(get_solve_service(config).get_queue_stats())
    except CoderepsError as e:
        _fail(e)

    if json_output:
        typer.echo(json.dumps(_stats_to_dict(queue_stats), indent=2))
    else:
        _echo_stats(queue_stats)


@app.command()
def history(
    ctx: typer.Context,
    problem_id: Annotated[str, typer.Argument(help="Problem ID from the data file.")],
    data_file: DataFileOption = None,
):
    """Show a problem's solve history, newest first."""
    config = _load_config(ctx, data_file=data_file)

    try:
        solves = asyncio.run(get_solve_service(config).get_solve_history(problem_id))
    except CoderepsError as e:
        _fail(e)

    if not solves:
        typer.secho(f"No solves recorded for {problem_id}.", fg="yellow")
        return

    for solve in solves:
        typer.echo(
            f"{format_display_date(solve.solved_at)}  {solve.personal_difficulty.label:<10} "
            f"ef={solve.easiness_factor:.2f} interval={solve.interval} "
            f"rep={solve.repetition}"
        )


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _load_config(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def main():
    app()
