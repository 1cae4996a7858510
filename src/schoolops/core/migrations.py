"""Reusable migration runner for both production and tests."""

import asyncio

from alembic.config import Config

from alembic import command


def run_migrations_sync(config_path: str = "alembic.ini") -> None:
    """Upgrade the database to the latest revision."""
    alembic_cfg = Config(config_path)
    command.upgrade(alembic_cfg, "head")


async def run_migrations_async(config_path: str = "alembic.ini") -> None:
    """Run Alembic migrations from async context.

    Alembic drives its own event loop for async drivers, so it runs in a thread.
    """
    await asyncio.to_thread(run_migrations_sync, config_path)
