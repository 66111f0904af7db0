"""Remove command implementation."""

import click

from blindspot.commands.common import run
from blindspot.core import installer as installer_ops
from blindspot.core.registry import Registry
from blindspot.core.session import Session, open_session


async def remove_package(session: Session, registry: Registry, name: str) -> bool:
    """Delete a package's binary and backup and drop it from the registry."""
    ctx = session.context("🪦", name)
    await ctx.notify("Deleting package")

    package = registry.get(name)
    if package is None:
        await ctx.notify("This package is not installed")
        return False

    await installer_ops.uninstall(package.installer, ctx, session.vault)
    registry.remove(name)
    registry.save()
    await ctx.notify("Package is deleted and removed from disk")
    return True


async def _remove(name: str) -> None:
    async with open_session() as session:
        registry = Registry.load(session.config.registry_path)
        await remove_package(session, registry, name)


@click.command()
@click.argument("name")
def remove(name: str):
    """Remove a package.

    NAME is the name of the installed package.
    """
    run(_remove(name))
