"""Flask CLI commands for HabitKeeper."""

from __future__ import annotations

import functools

import click

from .domain.auth import require_user_id
from .errors import FormValidationError, HabitKeeperError
from .extensions import get_context
from .infra.auth import StaticAuthProvider
from .models.habit import HabitFrequency
from .services import auth, demo_seed, habits
from .services.streaks import format_frequency


def _reports_errors(func):
    """Turn service errors into click errors with a readable message."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except FormValidationError as exc:
            details = "; ".join(f"{key}: {', '.join(msgs)}" for key, msgs in exc.errors.items())
            raise click.ClickException(f"{exc.message} ({details})") from exc
        except HabitKeeperError as exc:
            raise click.ClickException(exc.message) from exc

    return wrapper


def _user_id_for(identifier: str) -> int:
    context = get_context()
    user = context.user_repo.find_by_login(identifier)
    return require_user_id(StaticAuthProvider(user.id if user else None))


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("habitkeeper-signup")
    @click.option("--email", required=True)
    @click.option("--username", required=True)
    @click.password_option()
    @click.option("--name", default=None)
    @_reports_errors
    def signup(email: str, username: str, password: str, name: str | None) -> None:
        """Create a user account."""

        user = auth.sign_up(
            get_context().user_repo,
            form={"email": email, "username": username, "password": password, "name": name},
        )
        click.echo(f"Created user {user.username} (id {user.id})")

    @app.cli.command("habitkeeper-add-habit")
    @click.option("--user", "identifier", required=True, help="Email or username")
    @click.option("--title", required=True)
    @click.option("--description", default="")
    @click.option(
        "--frequency",
        type=click.Choice([f.value for f in HabitFrequency], case_sensitive=False),
        default=HabitFrequency.DAILY.value,
    )
    @_reports_errors
    def add_habit(identifier: str, title: str, description: str, frequency: str) -> None:
        """Create a habit for a user."""

        habit = habits.create_habit(
            get_context().habit_repo,
            user_id=_user_id_for(identifier),
            form={"title": title, "description": description, "frequency": frequency},
        )
        click.echo(f"Created habit #{habit.id}: {habit.title} ({format_frequency(habit.frequency)})")

    @app.cli.command("habitkeeper-complete")
    @click.option("--user", "identifier", required=True, help="Email or username")
    @click.argument("habit_id", type=int)
    @click.option("--notes", default="")
    @_reports_errors
    def complete(identifier: str, habit_id: int, notes: str) -> None:
        """Mark a habit complete for today."""

        completion = habits.complete_habit(
            get_context().habit_repo,
            habit_id=habit_id,
            user_id=_user_id_for(identifier),
            notes=notes,
        )
        click.echo(f"Habit #{habit_id} completed at {completion.completed_at:%Y-%m-%d %H:%M}")

    @app.cli.command("habitkeeper-streaks")
    @click.option("--user", "identifier", required=True, help="Email or username")
    @click.option("--ranked", is_flag=True, default=False, help="Order by best streak")
    @_reports_errors
    def streaks(identifier: str, ranked: bool) -> None:
        """Show current streak, best streak and total completions per habit."""

        repo = get_context().habit_repo
        user_id = _user_id_for(identifier)
        if ranked:
            views = habits.streak_leaderboard(repo, user_id=user_id)
        else:
            views = habits.list_habits_with_streaks(repo, user_id=user_id)
        if not views:
            click.echo("No habits yet.")
            return
        for view in views:
            data = view.streak_data
            marker = "*" if view.completed_today else " "
            click.echo(
                f"{marker} #{view.habit.id} {view.habit.title}: "
                f"streak {data.streak}, best {data.best_streak}, total {data.total}"
            )

    @app.cli.command("habitkeeper-seed")
    @click.option("--days", default=60, show_default=True, help="Days of completion history")
    @_reports_errors
    def seed(days: int) -> None:
        """Seed a demo user with habits and completion history."""

        context = get_context()
        click.echo("Seeding demo data...")
        summary = demo_seed.run_demo_seed(context.user_repo, context.habit_repo, days=days)
        click.echo(
            f"Demo user '{summary.user.username}': {summary.habits_created} habits, "
            f"{summary.completions_created} completions"
        )
