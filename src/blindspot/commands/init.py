"""Init command implementation."""

import click
from rich.markup import escape

from blindspot.commands.common import run
from blindspot.core.registry import Registry
from blindspot.core.session import open_session


async def _init() -> None:
    async with open_session() as session:
        registry = Registry(session.config.registry_path)
        ctx = session.context("🚧", "blindspot")
        if registry.exists():
            await ctx.notify(f"Config file {escape(str(registry.path))} already exists, not overwriting")
            return
        registry.save()
        await session.context("🎉", "blindspot").notify("Initialization successful")
        await session.context("🐚", "blindspot").notify(
            "Run `blindspot completion --help` to see if completion for your shell is available"
        )


@click.command()
def init():
    """Create a fresh config file for blindspot.

    Only the package list is created. blindspot itself is installed and
    upgraded with pip, not tracked as one of its own packages.
    """
    run(_init())
