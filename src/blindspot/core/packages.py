"""Package-level install and update operations."""

import copy
import logging
from datetime import datetime, timezone

from rich.markup import escape

from blindspot.core import installer as installer_ops
from blindspot.core.errors import CorruptedPackageError
from blindspot.core.github import choose_asset, github_slug
from blindspot.core.session import Session
from blindspot.models.package import Package
from blindspot.models.release import Dated, Version

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def _run_installer(package: Package, session: Session) -> None:
    ctx = session.context("📦", package.name)
    await installer_ops.install(
        package.installer,
        ctx,
        session.http,
        session.vault,
        session.config.scratch_dir,
    )


async def install_package(package: Package, session: Session) -> None:
    """Install a package from its URL or from the latest GitHub release.

    For a GitHub repo spec the package's origin is recorded and the URL is
    rewritten to the chosen release asset.
    """
    slug = github_slug(package.installer.url)
    if slug is None:
        package.release = Dated(utcnow())
    else:
        ctx = session.context("🪐", package.name)
        await ctx.notify("Treating package as a GitHub repository")
        release = await session.github.get_latest_release(slug)
        asset = await choose_asset(ctx, release)
        package.origin = slug
        package.installer.url = asset.download_url
        package.release = Version(release.tag_name)

    await _run_installer(package, session)
    package.last_update = utcnow()
    logger.info("Installed %s", package)


async def update_package(package: Package, session: Session) -> Package:
    """Return the updated version of *package*; the argument is left untouched."""
    pkg = copy.deepcopy(package)
    ctx = session.context("⛽", pkg.name)
    await ctx.notify("Updating package")
    last_update = pkg.last_update.strftime("%Y-%m-%d %H:%M") if pkg.last_update else "never"
    await ctx.notify(f"Last update: {last_update}")

    if pkg.origin is None:
        pkg.release = Dated(utcnow())
        await _run_installer(pkg, session)
        pkg.last_update = utcnow()
        return pkg

    if not isinstance(pkg.release, Version):
        raise CorruptedPackageError(
            f"Corrupted package {pkg.name}: GitHub package without a release tag "
            "(please reinstall)"
        )
    installed = pkg.release.tag

    github_ctx = session.context("🪐", pkg.name)
    release = await session.github.get_latest_release(pkg.origin)
    await ctx.notify(f"Installed release: {escape(installed)}")
    await ctx.notify(f"Latest release: {escape(release.tag_name)}")
    if release.tag_name == installed:
        await ctx.notify("Looks like the latest release is already installed")
        return pkg

    await ctx.notify(f"Other release available: {escape(release.tag_name)}")
    asset = await choose_asset(github_ctx, release)
    pkg.installer.url = asset.download_url
    await _run_installer(pkg, session)
    pkg.release = Version(release.tag_name)
    pkg.last_update = utcnow()
    return pkg
