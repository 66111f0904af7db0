"""Install command implementation."""

import click
from rich.markup import escape

from blindspot.commands.common import run
from blindspot.core.packages import install_package
from blindspot.core.registry import Registry
from blindspot.core.session import Session, open_session
from blindspot.models.installer import Archive, Compression, Installer
from blindspot.models.package import Package


async def install_new(
    session: Session,
    registry: Registry,
    name: str,
    url: str,
    force: bool = False,
    compression: Compression | None = None,
    archive: Archive | None = None,
) -> Package | None:
    """Install *url* as package *name* and record it in the registry.

    Returns the installed package, or None when the user declined to
    replace an existing package of the same name.
    """
    ctx = session.context("🔨", name)
    await ctx.notify("Building package")
    package = Package(
        name=name,
        installer=Installer(
            url=url,
            path=session.config.bin_dir / name,
            compression=compression,
            archive=archive,
        ),
    )

    existing = registry.get(name)
    if existing is not None:
        warn = session.context("❌", name)
        await warn.notify(f"Package is already installed: `{escape(str(existing))}`")
        if not force and (await warn.ask("Enter `y` to force installation")).strip() != "y":
            return None
        await session.context("🤷", name).notify("Installing anyways")
        # The old binary's backup slot is the one the new install reuses
        package.installer.backup = existing.installer.backup

    await install_package(package, session)
    registry.add(package)
    registry.save()
    await ctx.notify("Package is installed")
    return package


async def _install(name, url, force, compression, archive) -> None:
    async with open_session() as session:
        registry = Registry.load(session.config.registry_path)
        await install_new(session, registry, name, url, force, compression, archive)


@click.command()
@click.argument("name")
@click.argument("url")
@click.option("--force", "-f", is_flag=True, help="Install anyways and overwrite existing versions")
@click.option(
    "--compression",
    "-c",
    type=click.Choice(Compression.variants()),
    help="Set compression (guessed from the URL by default)",
)
@click.option(
    "--archive",
    "-a",
    type=click.Choice(Archive.variants()),
    help="Set archive type (guessed from the URL by default)",
)
def install(name: str, url: str, force: bool, compression: str | None, archive: str | None):
    """Install a single binary from a static download URL or a GitHub repo.

    NAME is the name of the package and can be anything you want.

    URL is either a direct download URL that always serves the latest
    version, or a GitHub repository as owner/repo.
    """
    run(
        _install(
            name,
            url,
            force,
            Compression.parse(compression) if compression else None,
            Archive.parse(archive) if archive else None,
        )
    )
