"""Installer data model and download format kinds."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from urllib.parse import urlsplit

from blindspot.core.errors import InvalidUrlError


class Compression(str, Enum):
    """Streaming decoder applied to the raw download."""

    NONE = "none"
    GZIP = "gzip"
    BZIP2 = "bzip2"
    XZ = "xz"

    @classmethod
    def parse(cls, value: str) -> "Compression":
        """Parse a compression name, e.g. from the command line."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Invalid compression: {value}. Use one of: {', '.join(cls.variants())}"
            ) from None

    @classmethod
    def variants(cls) -> list[str]:
        return [member.value for member in cls]

    def __str__(self) -> str:
        return self.value


class Archive(str, Enum):
    """How the decompressed payload is packaged."""

    NONE = "none"
    TAR = "tar"

    @classmethod
    def parse(cls, value: str) -> "Archive":
        """Parse an archive name, e.g. from the command line."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Invalid archive: {value}. Use one of: {', '.join(cls.variants())}"
            ) from None

    @classmethod
    def variants(cls) -> list[str]:
        return [member.value for member in cls]

    def __str__(self) -> str:
        return self.value


# Longest suffixes first so ".tar.gz" wins over ".gz"
_SUFFIXES: list[tuple[str, Archive, Compression]] = [
    (".tar.bz2", Archive.TAR, Compression.BZIP2),
    (".tar.gz", Archive.TAR, Compression.GZIP),
    (".tar.bz", Archive.TAR, Compression.BZIP2),
    (".tar.xz", Archive.TAR, Compression.XZ),
    (".tgz", Archive.TAR, Compression.GZIP),
    (".tbz", Archive.TAR, Compression.BZIP2),
    (".txz", Archive.TAR, Compression.XZ),
    (".tar", Archive.TAR, Compression.NONE),
    (".bz2", Archive.NONE, Compression.BZIP2),
    (".gz", Archive.NONE, Compression.GZIP),
    (".bz", Archive.NONE, Compression.BZIP2),
    (".xz", Archive.NONE, Compression.XZ),
]


def guess_formats(url: str) -> tuple[Archive, Compression]:
    """Guess archive and compression kinds from the file suffix of a URL."""
    try:
        path = urlsplit(url).path.lower()
    except ValueError as e:
        raise InvalidUrlError(f"Invalid URL {url}: {e}") from e
    for suffix, archive, compression in _SUFFIXES:
        if path.endswith(suffix):
            return archive, compression
    return Archive.NONE, Compression.NONE


@dataclass
class Installer:
    """Download configuration and on-disk state of one package."""

    url: str
    path: Path
    compression: Compression | None = None
    archive: Archive | None = None
    backup: Path | None = None

    def resolved_archive(self) -> Archive:
        """Explicit archive kind, or the one guessed from the URL."""
        if self.archive is not None:
            return self.archive
        return guess_formats(self.url)[0]

    def resolved_compression(self) -> Compression:
        """Explicit compression kind, or the one guessed from the URL."""
        if self.compression is not None:
            return self.compression
        return guess_formats(self.url)[1]

    def to_dict(self) -> dict:
        """Convert to dictionary for YAML serialization."""
        return {
            "url": self.url,
            "path": str(self.path),
            "compression": self.compression.value if self.compression else None,
            "archive": self.archive.value if self.archive else None,
            "backup": str(self.backup) if self.backup else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Installer":
        """Create Installer from dictionary."""
        compression = data.get("compression")
        archive = data.get("archive")
        backup = data.get("backup")
        return cls(
            url=data["url"],
            path=Path(data["path"]),
            compression=Compression.parse(compression) if compression else None,
            archive=Archive.parse(archive) if archive else None,
            backup=Path(backup) if backup else None,
        )
