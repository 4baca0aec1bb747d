"""User management CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table
from sqlmodel import select

from reviewapp.database import get_session_context
from reviewapp.models import User
from reviewapp.services.accounts import normalize_email
from reviewapp.services.security import hash_password

console = Console()
app = typer.Typer(help="User management commands")


@app.command("list")
def list_users():
    """List all users."""

    async def _list():
        async with get_session_context() as session:
            stmt = select(User).order_by(User.email)
            result = await session.execute(stmt)
            users = result.scalars().all()

            table = Table(title="Users")
            table.add_column("ID", style="cyan")
            table.add_column("Name")
            table.add_column("Email", style="green")
            table.add_column("Verified", style="magenta")
            table.add_column("Created", style="dim")

            for user in users:
                verified = "[green]Yes[/green]" if user.is_verified else "No"
                created = user.created_at.strftime("%Y-%m-%d") if user.created_at else "-"
                table.add_row(user.id, user.name, user.email, verified, created)

            console.print(table)

    asyncio.run(_list())


@app.command("create")
def create_user(
    email: str = typer.Argument(..., help="User email"),
    name: str = typer.Option(..., "--name", "-n", help="Display name"),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, confirmation_prompt=True, help="Password"
    ),
    verified: bool = typer.Option(False, "--verified", help="Skip email verification"),
):
    """Create a user directly, without sending a verification email."""

    async def _create():
        async with get_session_context() as session:
            address = normalize_email(email)
            result = await session.execute(select(User).where(User.email == address))
            if result.scalar_one_or_none():
                console.print(f"[red]Error:[/red] User {address} already exists")
                raise typer.Exit(1)

            user = User(
                name=name,
                email=address,
                password_hash=hash_password(password),
                is_verified=verified,
            )
            session.add(user)
            await session.commit()
            console.print(f"[green]Created user:[/green] {address} ({user.id}, verified={verified})")

    asyncio.run(_create())


@app.command("verify")
def verify_user(email: str = typer.Argument(..., help="User email")):
    """Mark a user's email as verified."""

    async def _verify():
        async with get_session_context() as session:
            address = normalize_email(email)
            result = await session.execute(select(User).where(User.email == address))
            user = result.scalar_one_or_none()

            if not user:
                console.print(f"[red]Error:[/red] User {address} not found")
                raise typer.Exit(1)

            if user.is_verified:
                console.print(f"[yellow]Warning:[/yellow] User {address} is already verified")
                return

            user.is_verified = True
            await session.commit()
            console.print(f"[green]Verified:[/green] {address}")

    asyncio.run(_verify())
