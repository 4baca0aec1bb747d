"""Maintenance CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from reviewapp.database import get_session_context
from reviewapp.tasks import queue
from reviewapp.tasks.maintenance import MAINTENANCE_TIMEOUT_SECONDS, purge_expired_tokens

console = Console()
app = typer.Typer(help="Maintenance and cleanup commands")


@app.command("prune-tokens")
def prune_tokens(
    dry_run: bool = typer.Option(False, "--dry-run", help="Only report, don't delete"),
    background: bool = typer.Option(False, "--background", "-b", help="Run in background worker"),
):
    """Delete expired email verification and password reset tokens."""

    async def _prune():
        if background:
            job = await queue.enqueue(
                "prune_expired_tokens",
                dry_run=dry_run,
                timeout=MAINTENANCE_TIMEOUT_SECONDS,
            )
            console.print(f"[green]Queued token pruning job:[/green] {job.id if job else 'unknown'}")
            return

        async with get_session_context() as session:
            counts = await purge_expired_tokens(session, dry_run=dry_run)

        table = Table(title="Expired Tokens")
        table.add_column("Table", style="cyan")
        table.add_column("Would Delete" if dry_run else "Deleted", justify="right")
        for name, count in counts.items():
            table.add_row(name, str(count))
        console.print(table)

    asyncio.run(_prune())
