"""Package data model."""

from dataclasses import dataclass
from datetime import datetime

from blindspot.models.installer import Installer
from blindspot.models.release import Release, release_from_dict, release_to_dict


@dataclass
class Package:
    """Represents an installed package."""

    name: str
    installer: Installer
    release: Release | None = None
    last_update: datetime | None = None
    origin: str | None = None  # owner/repo when resolved through GitHub

    def __str__(self) -> str:
        return f"{self.name} release {self.release or 'unknown'}"

    def to_dict(self) -> dict:
        """Convert to dictionary for YAML serialization."""
        return {
            "installer": self.installer.to_dict(),
            "release": release_to_dict(self.release),
            "last_update": self.last_update.isoformat() if self.last_update else None,
            "origin": self.origin,
        }

    @classmethod
    def from_dict(cls, name: str, data: dict) -> "Package":
        """Create Package from dictionary."""
        last_update = data.get("last_update")
        if isinstance(last_update, str):
            last_update = datetime.fromisoformat(last_update)

        return cls(
            name=name,
            installer=Installer.from_dict(data["installer"]),
            release=release_from_dict(data.get("release")),
            last_update=last_update,
            origin=data.get("origin"),
        )
