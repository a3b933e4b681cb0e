"""Database migration CLI commands using Alembic programmatically."""

import typer
from loguru import logger

db_app = typer.Typer()


@db_app.command()
def upgrade(
    revision: str = typer.Argument("head", help="Target revision"),
) -> None:
    """Create or migrate the sync tables up to the target revision."""
    from alembic import command
    from alembic.config import Config

    config = Config("alembic.ini")
    logger.info("Upgrading database to {}", revision)
    command.upgrade(config, revision)
    logger.info("Database upgrade complete")


@db_app.command()
def downgrade(
    revision: str = typer.Argument("-1", help="Target revision"),
) -> None:
    """Roll the sync tables back to the target revision."""
    from alembic import command
    from alembic.config import Config

    config = Config("alembic.ini")
    logger.info("Downgrading database to {}", revision)
    command.downgrade(config, revision)
    logger.info("Database downgrade complete")


@db_app.command()
def current() -> None:
    """Show the current database migration revision."""
    from alembic import command
    from alembic.config import Config

    config = Config("alembic.ini")
    command.current(config, verbose=True)
