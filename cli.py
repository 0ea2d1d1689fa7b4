"""
Operator commands for the portfolio API.

    python cli.py hash-password            # prompt (hidden input)
    python cli.py hash-password 'S3cret!'  # from the argument
    python cli.py seed                     # founding guestbook entries
    python cli.py serve --port 3001
"""

import logging

import click
import uvicorn
from sqlalchemy.exc import SQLAlchemyError

from config import HOST, PORT, DEBUG
from database import SessionLocal, create_tables
from guestbook.sample_data import seed_guestbook
from security.auth import hash_password

logger = logging.getLogger(__name__)

# Exit status codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1


@click.group()
def cli():
    """Portfolio API management commands."""
    logging.basicConfig(level=logging.INFO, format='%(levelname)s - %(message)s')


@cli.command("hash-password")
@click.argument("password", required=False)
def hash_password_command(password):
    """Print a bcrypt hash for ADMIN_PASSWORD_HASH."""
    if password is None:
        password = click.prompt("Enter your admin password", hide_input=True, default="", show_default=False)

    if not password:
        click.echo("No password entered. Exiting.", err=True)
        raise SystemExit(EXIT_ERROR)

    click.echo(f"ADMIN_PASSWORD_HASH={hash_password(password)}")
    click.echo("Keep this hash in .env only; it changes on every run because bcrypt salts each hash.", err=True)


@cli.command()
def seed():
    """Insert the founding guestbook entries (idempotent)."""
    create_tables()
    db = SessionLocal()
    try:
        added, skipped = seed_guestbook(db)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Seed failed")
        raise SystemExit(EXIT_ERROR)
    finally:
        db.close()

    click.echo(f"Seeding complete: {len(added)} added, {len(skipped)} skipped.")


@cli.command()
@click.option('--host', default=HOST, help='Host to bind to')
@click.option('--port', default=PORT, type=int, help='Port to bind to')
@click.option('--reload/--no-reload', default=DEBUG, help='Reload on code changes')
def serve(host, port, reload):
    """Run the API under uvicorn, trusting X-Forwarded-For from the proxy."""
    uvicorn.run("main:app", host=host, port=port, reload=reload, proxy_headers=True, forwarded_allow_ips="*")


if __name__ == "__main__":
    cli()
