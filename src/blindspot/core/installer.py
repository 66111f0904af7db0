"""Install, revert and uninstall the binary of a single package."""

import asyncio
import logging
from pathlib import Path

import httpx
from rich.markup import escape

from blindspot.core.backup import BackupVault
from blindspot.core.decompress import open_sink
from blindspot.core.downloader import download
from blindspot.core.extractor import install_payload
from blindspot.core.ui import Context
from blindspot.models.installer import Installer

logger = logging.getLogger(__name__)


def scratch_path(installer: Installer, scratch_dir: Path) -> Path:
    """Temporary download location, named after the destination binary."""
    scratch_dir.mkdir(parents=True, exist_ok=True)
    return scratch_dir / installer.path.name


async def install(
    installer: Installer,
    ctx: Context,
    client: httpx.AsyncClient,
    vault: BackupVault,
    scratch_dir: Path,
) -> None:
    """Download the installer's URL and put the binary at its path.

    An existing binary at the destination is moved into the backup vault
    first and recorded in ``installer.backup``. If installing the new payload
    fails, the displaced binary is put back.
    """
    archive = installer.resolved_archive()
    compression = installer.resolved_compression()
    await ctx.notify(
        f"Treating file as a [bold]{archive}[/bold] archive "
        f"with [bold]{compression}[/bold] compression"
    )

    tmp_path = scratch_path(installer, scratch_dir)
    await ctx.notify(f"Fetching {escape(installer.url)}")
    try:
        with open_sink(compression, open(tmp_path, "wb")) as sink:
            await download(installer.url, sink, ctx, client)

        displaced = None
        if installer.path.exists():
            displaced = await asyncio.to_thread(vault.displace, installer.path)
            installer.backup = displaced
            await ctx.notify(f"Previous binary kept at {escape(str(displaced))}")

        try:
            await install_payload(ctx, archive, tmp_path, installer.path)
        except Exception:
            if displaced is not None:
                logger.warning("Install of %s failed, restoring previous binary", installer.path)
                await asyncio.to_thread(vault.revert, displaced, installer.path)
                installer.backup = None
            raise
    finally:
        tmp_path.unlink(missing_ok=True)


async def revert(installer: Installer, ctx: Context, vault: BackupVault) -> bool:
    """Restore the backup of the installer, if there is one."""
    if installer.backup is None:
        await ctx.notify("No backup found for this package, doing nothing")
        return False

    await ctx.notify(f"From {escape(str(installer.backup))}")
    await ctx.notify(f"To {escape(str(installer.path))}")
    await asyncio.to_thread(vault.revert, installer.backup, installer.path)
    installer.backup = None
    return True


async def uninstall(installer: Installer, ctx: Context, vault: BackupVault) -> None:
    """Delete the installed binary and its backup."""
    if installer.backup is not None:
        vault.discard(installer.backup)
        installer.backup = None

    await ctx.notify(f"Deleting file {escape(str(installer.path))}")
    if installer.path.exists():
        installer.path.unlink()
    else:
        await ctx.notify("File was already gone")
