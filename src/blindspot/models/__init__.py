"""Data models for blindspot."""

from blindspot.models.installer import Archive, Compression, Installer
from blindspot.models.package import Package
from blindspot.models.release import Asset, Dated, GitHubRelease, Release, Version

__all__ = [
    "Archive",
    "Asset",
    "Compression",
    "Dated",
    "GitHubRelease",
    "Installer",
    "Package",
    "Release",
    "Version",
]
