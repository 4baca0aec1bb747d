"""Database management CLI commands (thin wrappers around Alembic)."""

import subprocess
import sys

import typer
from rich.console import Console

console = Console()
app = typer.Typer(help="Database management commands")


def _alembic(*args: str) -> bool:
    """Run an alembic command in a subprocess and report whether it succeeded."""
    result = subprocess.run([sys.executable, "-m", "alembic", *args], check=False)
    return result.returncode == 0


@app.command("migrate")
def migrate(
    revision: str = typer.Argument("head", help="Target revision (default: head)"),
):
    """Run database migrations to the specified revision."""
    console.print(f"[dim]Running migrations to {revision}...[/dim]")
    if not _alembic("upgrade", revision):
        console.print("[red]Migration failed![/red]")
        raise typer.Exit(1)
    console.print("[green]Migrations complete![/green]")


@app.command("rollback")
def rollback(
    revision: str = typer.Argument("-1", help="Target revision (default: -1 for one step back)"),
):
    """Rollback database migrations."""
    console.print(f"[dim]Rolling back to {revision}...[/dim]")
    if not _alembic("downgrade", revision):
        console.print("[red]Rollback failed![/red]")
        raise typer.Exit(1)
    console.print("[green]Rollback complete![/green]")


@app.command("current")
def current():
    """Show current database revision."""
    _alembic("current")


@app.command("reset")
def reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
):
    """Drop every table and migrate again. Deletes all accounts and reviews."""
    if not force:
        console.print("[bold red]WARNING:[/bold red] This will delete ALL users, tokens and reviews!")
        if not typer.confirm("Are you sure you want to continue?"):
            console.print("[dim]Cancelled[/dim]")
            raise typer.Exit(0)

    if not _alembic("downgrade", "base") or not _alembic("upgrade", "head"):
        console.print("[red]Database reset failed![/red]")
        raise typer.Exit(1)
    console.print("[green]Database reset complete![/green]")


@app.command("create-migration")
def create_migration(
    message: str = typer.Argument(..., help="Migration message"),
    autogenerate: bool = typer.Option(True, "--autogenerate/--no-autogenerate", help="Auto-detect model changes"),
):
    """Create a new migration."""
    args = ["revision", "-m", message]
    if autogenerate:
        args.append("--autogenerate")

    if not _alembic(*args):
        console.print("[red]Failed to create migration![/red]")
        raise typer.Exit(1)
    console.print("[green]Migration created![/green]")
