"""Release data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Version:
    """Release of a GitHub package, identified by its tag."""

    tag: str

    def __str__(self) -> str:
        return self.tag


@dataclass(frozen=True)
class Dated:
    """Release of a plain URL package, identified by when it was fetched."""

    timestamp: datetime

    def __str__(self) -> str:
        return self.timestamp.strftime("%Y-%m-%d %H:%M")


Release = Version | Dated


def release_to_dict(release: Release | None) -> dict | None:
    """Convert a release marker to a dictionary for YAML serialization."""
    if isinstance(release, Version):
        return {"version": release.tag}
    if isinstance(release, Dated):
        return {"dated": release.timestamp.isoformat()}
    return None


def release_from_dict(data: dict | None) -> Release | None:
    """Create a release marker from dictionary."""
    if not data:
        return None
    if "version" in data:
        return Version(str(data["version"]))
    if "dated" in data:
        timestamp = data["dated"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return Dated(timestamp)
    raise ValueError(f"Unknown release marker: {data}")


@dataclass
class Asset:
    """Represents a GitHub release asset."""

    name: str
    download_url: str
    size: int

    @classmethod
    def from_api_response(cls, data: dict) -> "Asset":
        """Create Asset from GitHub API response."""
        return cls(
            name=data["name"],
            download_url=data["browser_download_url"],
            size=int(data["size"]),
        )


@dataclass
class GitHubRelease:
    """Represents a GitHub release."""

    tag_name: str
    assets: list[Asset]
    name: str = ""

    @classmethod
    def from_api_response(cls, data: dict) -> "GitHubRelease":
        """Create GitHubRelease from GitHub API response."""
        assets = data.get("assets", [])
        if not isinstance(assets, list):
            raise TypeError("assets is not a list")
        return cls(
            tag_name=str(data["tag_name"]),
            assets=[Asset.from_api_response(a) for a in assets],
            name=data.get("name") or data["tag_name"],
        )
