"""Command-line interface for HabitGrove."""

from __future__ import annotations

import json
from datetime import date
from functools import wraps
from pathlib import Path
from typing import Callable, Optional

import click

from .config import BaseConfig
from .context import HabitGroveContext, create_context
from .errors import HabitGroveError
from .logging_config import setup_logging
from .models.disruption import DisruptionType
from .models.habit import HabitCategory
from .services import export_csv
from .services.import_legacy import load_legacy_store, persist_legacy_import


def _parse_day(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}") from exc


def domain_errors(func: Callable) -> Callable:
    """Render domain failures as ``kind: message`` and exit non-zero."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except HabitGroveError as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


pass_context = click.make_pass_decorator(HabitGroveContext)


@click.group()
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory holding the database and logs.")
@click.option("--owner", default=None, help="Owner id to act as.")
@click.pass_context
def main(ctx: click.Context, data_dir: Optional[Path], owner: Optional[str]) -> None:
    """Track habits that survive disruptions."""

    config = BaseConfig(data_dir)
    setup_logging(config)
    app = create_context(config, owner_id=owner)
    ctx.obj = app
    ctx.call_on_close(app.close)


@main.command("add")
@click.argument("name")
@click.option("--category", type=click.Choice([c.value for c in HabitCategory]),
              default=HabitCategory.BASELINE.value, show_default=True)
@pass_context
@domain_errors
def add_habit(app: HabitGroveContext, name: str, category: str) -> None:
    """Plant a new habit."""

    habit = app.registry.add_habit(name, category)
    click.echo(f"Planted {habit.name!r} ({habit.category}) id={habit.id}")


@main.command("remove")
@click.argument("habit_id")
@pass_context
@domain_errors
def remove_habit(app: HabitGroveContext, habit_id: str) -> None:
    """Remove a habit and its history."""

    if app.registry.remove_habit(habit_id):
        click.echo("Habit removed")
    else:
        click.echo("No such habit; nothing to do")


@main.command("toggle-active")
@click.argument("habit_id")
@pass_context
@domain_errors
def toggle_active(app: HabitGroveContext, habit_id: str) -> None:
    habit = app.registry.toggle_active(habit_id)
    click.echo(f"{habit.name}: {'active' if habit.is_active else 'inactive'}")


@main.command("pause")
@click.argument("habit_id")
@click.option("--reason", default="", help="Why the habit is paused.")
@pass_context
@domain_errors
def pause_habit(app: HabitGroveContext, habit_id: str, reason: str) -> None:
    habit = app.registry.pause(habit_id, reason)
    click.echo(f"{habit.name}: paused")


@main.command("done")
@click.argument("habit_id")
@click.option("--on", "on_day", default=None, help="Day to toggle (YYYY-MM-DD); defaults to today.")
@pass_context
@domain_errors
def toggle_done(app: HabitGroveContext, habit_id: str, on_day: Optional[str]) -> None:
    """Toggle a habit's completion for a day."""

    completed = app.ledger.toggle_completion(habit_id, _parse_day(on_day))
    click.echo("Completed" if completed else "Not completed")


@main.command("status")
@click.option("--as-of", default=None, help="Reference day (YYYY-MM-DD).")
@pass_context
@domain_errors
def status(app: HabitGroveContext, as_of: Optional[str]) -> None:
    """Show habits, streaks, disruption state and health."""

    day = _parse_day(as_of) or date.today()
    expected = {h.id for h in app.expected_habits()}
    for habit in app.registry.habits():
        marker = "x" if app.ledger.is_completed_on(habit.id, day) else " "
        flags = []
        if not habit.is_active:
            flags.append("inactive")
        elif habit.id not in expected:
            flags.append("paused by disruption")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        click.echo(
            f"[{marker}] {habit.name} ({habit.category}) "
            f"streak={app.ledger.compute_streak(habit.id, day)}{suffix}  id={habit.id}"
        )
    episode = app.disruptions.active_episode()
    if episode is not None:
        click.echo(f"Disruption: {episode.disruption_type} since {episode.started_at:%Y-%m-%d}")
        if episode.recovery_plan and not app.banner.is_dismissed(episode):
            click.echo(f"Recovery plan: {episode.recovery_plan}")
    click.echo(f"Health: {app.health(day)}")


@main.group("disruption")
def disruption() -> None:
    """Start, end or toggle disruption mode."""


@disruption.command("start")
@click.option("--type", "disruption_type", type=click.Choice([t.value for t in DisruptionType]),
              default=DisruptionType.MANUAL.value, show_default=True)
@click.option("--plan", default=None, help="Recovery plan text.")
@pass_context
@domain_errors
def disruption_start(app: HabitGroveContext, disruption_type: str, plan: Optional[str]) -> None:
    episode = app.disruptions.start_disruption(disruption_type, plan)
    click.echo(f"{episode.disruption_type} mode activated; {len(episode.paused_habit_ids)} habits paused")


@disruption.command("end")
@pass_context
@domain_errors
def disruption_end(app: HabitGroveContext) -> None:
    if app.disruptions.end_disruption() is None:
        click.echo("No active disruption")
    else:
        click.echo("Welcome back! All habits are active again.")


@disruption.command("toggle")
@pass_context
@domain_errors
def disruption_toggle(app: HabitGroveContext) -> None:
    episode = app.disruptions.toggle_disruption()
    click.echo("Disruption mode on" if episode and episode.is_open else "Disruption mode off")


@disruption.command("dismiss")
@pass_context
def disruption_dismiss(app: HabitGroveContext) -> None:
    """Hide the current episode's notice without ending it."""

    app.banner.dismiss(app.disruptions.active_episode())
    click.echo("Notice dismissed")


@main.command("log")
@click.option("--mood", type=click.IntRange(1, 5), default=None)
@click.option("--notes", default="")
@click.option("--date", "log_date", default=None, help="Day to log (YYYY-MM-DD).")
@pass_context
@domain_errors
def log_day(app: HabitGroveContext, mood: Optional[int], notes: str, log_date: Optional[str]) -> None:
    """Save the daily mood/notes log."""

    result = app.intake.save_log(mood, notes, _parse_day(log_date))
    if result.disruption_detected:
        click.echo(f"{result.disruption_type} detected. Check your recovery plan!")
    else:
        click.echo("Daily log saved")


@main.command("analytics")
@pass_context
def analytics(app: HabitGroveContext) -> None:
    click.echo(json.dumps(app.analytics().to_dict(), indent=2))


@main.command("export")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None)
@pass_context
def export(app: HabitGroveContext, output: Optional[Path]) -> None:
    """Write the habit ledger to CSV."""

    path = output or (Path(app.config.DATA_DIR) / "exports" / export_csv.default_export_name())
    export_csv.export_habits_csv(rows=app.export_rows(), output_path=path)
    click.echo(f"Export written: {path}")


@main.command("suggest")
@click.option("--consent/--no-consent", default=None, help="Record AI consent before asking.")
@pass_context
def suggest(app: HabitGroveContext, consent: Optional[bool]) -> None:
    if consent is not None:
        app.set_ai_consent(consent)
    result = app.suggestions()
    click.echo(result.suggestion)
    for tip in result.tips:
        click.echo(f"- {tip}")


@main.command("import-legacy")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@pass_context
@domain_errors
def import_legacy(app: HabitGroveContext, path: Path) -> None:
    """Import a legacy JSON store export."""

    result = load_legacy_store(path.read_text(encoding="utf-8"), app.owner_id)
    persist_legacy_import(
        result,
        habit_repo=app.habit_repo,
        owner_id=app.owner_id,
        settings_repo=app.settings_repo,
        disruptions=app.disruptions,
        cap=app.config.MAX_ACTIVE_HABITS,
    )
    click.echo(
        f"Imported {len(result.habits)} habits and {len(result.completions)} records"
        f" ({result.skipped} skipped)"
    )


if __name__ == "__main__":  # pragma: no cover
    main()
