"""Revert command implementation."""

import click

from blindspot.commands.common import run
from blindspot.core import installer as installer_ops
from blindspot.core.registry import Registry
from blindspot.core.session import Session, open_session


async def revert_package(session: Session, registry: Registry, name: str) -> bool:
    """Put back the binary replaced by the last install or update."""
    ctx = session.context("⏪", name)
    await ctx.notify("Reverting package")

    package = registry.get(name)
    if package is None:
        await ctx.notify("This package is not installed")
        return False

    reverted = await installer_ops.revert(package.installer, ctx, session.vault)
    if reverted:
        registry.save()
    return reverted


async def _revert(name: str) -> None:
    async with open_session() as session:
        registry = Registry.load(session.config.registry_path)
        await revert_package(session, registry, name)


@click.command()
@click.argument("name")
def revert(name: str):
    """Revert the last update of a package.

    This only works once after every install or update of NAME.
    """
    run(_revert(name))
