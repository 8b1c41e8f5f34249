"""Admin CLI for Blogdesk (`blogdesk-admin`)."""

import asyncio
from typing import Optional

import typer
from rich.console import Console

from blogdesk.config import settings
from blogdesk.database import Database
from blogdesk.services.admin_service import admin_service

app = typer.Typer(
    name="blogdesk-admin",
    help="Blogdesk administration commands",
    no_args_is_help=True,
)

console = Console()


@app.command()
def init(
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Admin email (default: ADMIN_EMAIL)"),
    password: Optional[str] = typer.Option(None, "--password", "-p", help="Admin password (default: ADMIN_PASSWORD)"),
):
    """Create the admin account unless it already exists."""
    email = email or settings.admin_email
    password = password or settings.admin_password
    if not email or not password:
        console.print("[red]Admin email and password are required (options or ADMIN_EMAIL/ADMIN_PASSWORD)[/red]")
        raise typer.Exit(code=1)

    async def run():
        database = Database.from_settings(settings)
        try:
            async with database.session() as session:
                return await admin_service.ensure_admin(session, email, password)
        finally:
            await database.dispose()

    admin, created = asyncio.run(run())
    if created:
        console.print(f"[green]Admin created: {admin.email}[/green]")
    else:
        console.print(f"[yellow]Admin already exists: {admin.email}[/yellow]")


@app.command("create-tables")
def create_tables():
    """Create all tables directly (development; use Alembic elsewhere)."""

    async def run():
        database = Database.from_settings(settings)
        try:
            await database.create_all()
        finally:
            await database.dispose()

    asyncio.run(run())
    console.print("[green]Tables created[/green]")


if __name__ == "__main__":
    app()
