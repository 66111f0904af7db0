"""Archive member extraction and binary installation."""

import asyncio
import logging
import shutil
import tarfile
from dataclasses import dataclass
from pathlib import Path

from rich.markup import escape

from blindspot.core.errors import BlindspotError
from blindspot.core.ui import Context
from blindspot.models.installer import Archive

logger = logging.getLogger(__name__)

# Owner and group may read, write and execute; nobody else has access
EXECUTABLE_MODE = 0o750


class ExtractionError(BlindspotError):
    """Error during extraction."""

    pass


@dataclass(frozen=True)
class ArchiveEntry:
    """A regular file inside a tar archive."""

    index: int
    size: int
    path: str


def move_executable(src: Path, dest: Path) -> None:
    """Move a file into place and give it executable permissions.

    Copies then removes rather than renaming, since the scratch directory,
    the bin directory and the backup directory may be on different
    filesystems.
    """
    shutil.copyfile(src, dest)
    src.unlink()
    dest.chmod(EXECUTABLE_MODE)


def _files(tar: tarfile.TarFile):
    return (member for member in tar if member.isfile())


def list_entries(archive_path: Path) -> list[ArchiveEntry]:
    """List the regular files of a tar archive in container order."""
    try:
        with tarfile.open(archive_path, "r:*") as tar:
            return [
                ArchiveEntry(index, member.size, member.name)
                for index, member in enumerate(_files(tar))
            ]
    except (tarfile.TarError, OSError) as e:
        raise ExtractionError(f"Failed to read archive {archive_path}: {e}") from e


def extract_entry(archive_path: Path, index: int, dest: Path) -> ArchiveEntry:
    """Stream the *index*-th regular file of the archive to *dest*."""
    try:
        with tarfile.open(archive_path, "r:*") as tar:
            for position, member in enumerate(_files(tar)):
                if position != index:
                    continue
                source = tar.extractfile(member)
                if source is None:
                    raise ExtractionError(f"Archive member {member.name} has no content")
                with source, open(dest, "wb") as out:
                    shutil.copyfileobj(source, out)
                dest.chmod(EXECUTABLE_MODE)
                return ArchiveEntry(index, member.size, member.name)
    except (tarfile.TarError, OSError) as e:
        raise ExtractionError(f"Failed to extract from {archive_path}: {e}") from e

    raise ExtractionError(f"Archive {archive_path} has no file number {index}")


async def install_tar(ctx: Context, src: Path, dest: Path) -> ArchiveEntry:
    """Let the user pick one file of a tar archive and install it to *dest*."""
    entries = await asyncio.to_thread(list_entries, src)
    if not entries:
        raise ExtractionError(f"Archive {src} contains no files")

    await ctx.notify("Choose a file from Tar archive...")
    for entry in entries:
        await ctx.notify(
            f"[bold]-> {entry.index}[/bold]\t{entry.size / 1_000_000:.2f}mb\t{escape(entry.path)}"
        )

    pick = await ctx.ask_number(0, len(entries), "Enter the file number to install:")
    await ctx.notify(f"Installing {escape(str(dest))}")
    entry = await asyncio.to_thread(extract_entry, src, pick, dest)
    logger.info("Extracted %s from %s to %s", entry.path, src, dest)
    return entry


async def install_payload(ctx: Context, archive: Archive, src: Path, dest: Path) -> None:
    """Turn the downloaded (and decompressed) file into the installed binary."""
    await ctx.notify(f"Installing into {escape(str(dest))}")
    if archive is Archive.TAR:
        await install_tar(ctx, src, dest)
    else:
        await asyncio.to_thread(move_executable, src, dest)
