"""Click CLI for running the DM dashboard server."""

from __future__ import annotations

import asyncio
import logging

import click
import uvicorn
from dotenv import load_dotenv


def get_settings(ctx: click.Context):
    return ctx.obj["settings"]


@click.group()
@click.option("--env-file", type=click.Path(dir_okay=False), default=".env",
              help="Dotenv file with DMD_* settings.")
@click.pass_context
def cli(ctx: click.Context, env_file: str) -> None:
    """DM dashboard combat tracker backend."""
    ctx.ensure_object(dict)
    load_dotenv(env_file)
    # Imported after the dotenv file so DMD_* values reach the settings object
    from server.config import settings

    ctx.obj["settings"] = settings


@cli.command()
@click.option("--host", default=None, help="Bind address (default: DMD_HOST).")
@click.option("--port", type=int, default=None, help="Bind port (default: DMD_PORT).")
@click.option("--reload", is_flag=True, help="Reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Run the HTTP API."""
    settings = get_settings(ctx)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "server.app:app",
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level,
        reload=reload,
    )


@cli.command("init-db")
@click.option("--db-path", default=None, help="SQLite file (default: DMD_DB_PATH).")
@click.pass_context
def init_db_command(ctx: click.Context, db_path: str | None) -> None:
    """Create the database schema."""
    from server.db import close_db, init_db

    path = db_path or get_settings(ctx).db_path

    async def _run() -> None:
        await init_db(path)
        await close_db()

    asyncio.run(_run())
    click.echo(f"Database initialized at {path}")
