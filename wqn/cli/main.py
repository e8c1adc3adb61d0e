"""
Typer CLI for the wrong-question-notebook review service.

Commands:
    wqn serve                              - Run the API server
    wqn db init                            - Initialize database tables
    wqn sessions list --user USER_ID       - List a user's review sessions
    wqn sessions summary SESSION_ID --user - Show a session's summary
    wqn info                               - Show configuration
    wqn version                            - Show version information

Usage:
    wqn --help
    wqn db init
    wqn sessions list --user 7f7c... --active
"""

from __future__ import annotations

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from config import get_settings
from wqn import __version__
from wqn.logging_config import configure_logging
from wqn.review.errors import ReviewEngineError
from wqn.review.models import ActingUser

app = typer.Typer(
    help="wrong-question-notebook CLI: review session service and maintenance",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Wrong question notebook review service."""
    configure_logging("DEBUG" if verbose else None)


# ========================================
# SERVER
# ========================================


@app.command("serve")
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (default: API_HOST)"),
    port: int = typer.Option(None, "--port", "-p", help="Port (default: API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the FastAPI server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "wqn.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


# ========================================
# DATABASE COMMANDS
# ========================================

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """
    Initialize database tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    logger.info("Initializing database tables...")

    try:
        from wqn.db.database import init_db

        init_db()
        rprint("[green]✓[/green] Database initialized!")
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        raise typer.Exit(code=1)


# ========================================
# SESSION COMMANDS
# ========================================

sessions_app = typer.Typer(help="Inspect review sessions")
app.add_typer(sessions_app, name="sessions")


@sessions_app.command("list")
def sessions_list(
    user: str = typer.Option(..., "--user", "-u", help="User ID"),
    active: bool = typer.Option(False, "--active", help="Only active sessions"),
) -> None:
    """List a user's review sessions, most recent activity first."""
    from wqn.db.database import session_scope
    from wqn.db.repositories import build_review_service

    with session_scope() as db:
        sessions = build_review_service(db).list_sessions(ActingUser(id=user), active_only=active)

    if not sessions:
        rprint("[yellow]⚠[/yellow] No review sessions found")
        return

    table = Table(title=f"Review sessions ({len(sessions)})")
    table.add_column("Session", style="cyan")
    table.add_column("Problem set", style="dim")
    table.add_column("Active")
    table.add_column("Progress", justify="right")
    table.add_column("Last activity", style="dim")

    for s in sessions:
        state = s.state
        table.add_row(
            s.id,
            s.problem_set_id,
            "[green]yes[/green]" if s.is_active else "no",
            f"{len(state.completed_problem_ids)}/{len(state.problem_ids)}",
            s.last_activity_at.strftime("%Y-%m-%d %H:%M") if s.last_activity_at else "-",
        )

    console.print(table)


@sessions_app.command("summary")
def sessions_summary(
    session_id: str = typer.Argument(..., help="Session ID"),
    user: str = typer.Option(..., "--user", "-u", help="User ID (session owner)"),
) -> None:
    """Show the summary of a session without closing it."""
    from wqn.db.database import session_scope
    from wqn.db.repositories import build_review_service

    try:
        with session_scope() as db:
            summary = build_review_service(db).preview_summary(session_id, ActingUser(id=user))
    except ReviewEngineError as e:
        rprint(f"[red]✗[/red] {e.message}")
        raise typer.Exit(code=1)

    table = Table(title=f"Session {session_id}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")

    table.add_row("Problems", str(summary.total_problems))
    table.add_row("Answered", str(summary.completed_count))
    table.add_row("Correct", str(summary.correct_count))
    table.add_row("Incorrect", str(summary.incorrect_count))
    table.add_row("Skipped", str(summary.skipped_count))
    table.add_row("Accuracy", f"{summary.accuracy}%")
    table.add_row("Elapsed", f"{summary.elapsed_ms // 1000}s")
    for status, delta in summary.status_deltas.items():
        table.add_row(f"Δ {status}", f"{delta:+d}")

    console.print(table)


# ========================================
# INFO
# ========================================


@app.command("info")
def show_info() -> None:
    """Show configuration."""
    settings = get_settings()

    table = Table(title="wrong-question-notebook Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row(
        "Database URL",
        settings.database_url.split("@")[-1] if "@" in settings.database_url else settings.database_url,
    )
    table.add_row("API", f"{settings.api_host}:{settings.api_port}")
    table.add_row("Default randomize", str(settings.default_randomize))
    table.add_row("Default session size", str(settings.default_session_size or "unlimited"))
    table.add_row("Log Level", settings.log_level)

    console.print(table)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    rprint(f"[bold]wrong-question-notebook[/bold] v{__version__}")
    rprint("  Review session engine")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
