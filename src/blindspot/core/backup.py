"""Single-slot backups of replaced binaries."""

import logging
from pathlib import Path

from blindspot.core.extractor import move_executable

logger = logging.getLogger(__name__)


class BackupVault:
    """Keeps the previous binary of each package in the data directory.

    Backups are named after the binary they displaced. Package binaries live
    at ``<bin_dir>/<name>`` and names are unique, so each package owns
    exactly one slot; displacing again overwrites it.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir

    def slot(self, current: Path) -> Path:
        return self.data_dir / current.name

    def displace(self, current: Path) -> Path:
        """Move *current* into its backup slot and return the new location."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        target = self.slot(current)
        move_executable(current, target)
        logger.info("Backed up %s to %s", current, target)
        return target

    def revert(self, backup: Path, destination: Path) -> None:
        """Move a backup back over *destination*."""
        move_executable(backup, destination)
        logger.info("Restored %s from %s", destination, backup)

    def discard(self, backup: Path) -> None:
        """Delete a backup."""
        backup.unlink(missing_ok=True)
        logger.info("Discarded backup %s", backup)
