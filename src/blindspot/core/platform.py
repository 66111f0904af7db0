"""Platform detection and asset matching."""

import platform
import re
from dataclasses import dataclass

from blindspot.models.release import Asset


@dataclass
class PlatformInfo:
    """Current platform information."""

    os: str  # darwin, linux, windows
    arch: str  # amd64, arm64

    @classmethod
    def detect(cls) -> "PlatformInfo":
        """Detect current platform."""
        system = platform.system().lower()
        machine = platform.machine().lower()

        # Normalize architecture
        if machine in ("x86_64", "amd64"):
            arch = "amd64"
        elif machine in ("arm64", "aarch64"):
            arch = "arm64"
        elif machine in ("i386", "i686", "x86"):
            arch = "386"
        else:
            arch = machine

        return cls(os=system, arch=arch)


# Patterns to match OS in asset names
OS_PATTERNS = {
    "darwin": [r"darwin", r"macos", r"apple", r"osx"],
    "linux": [r"linux", r"musl", r"gnu"],
    "windows": [r"windows", r"win64", r"win32", r"\.exe$"],
}

# Patterns to match architecture in asset names
ARCH_PATTERNS = {
    "amd64": [r"amd64", r"x86_64", r"x64"],
    "arm64": [r"arm64", r"aarch64"],
    "386": [r"i386", r"i686", r"386"],
}

# Signature and checksum files never contain a binary
SKIP_EXTENSIONS = (".txt", ".md", ".sha256", ".sha512", ".sig", ".asc", ".sbom", ".pem")


def score_asset(asset: Asset, platform_info: PlatformInfo) -> int:
    """Score an asset based on platform match. Higher is better, -1 means no match."""
    name = asset.name.lower()

    if name.endswith(SKIP_EXTENSIONS):
        return -1

    score = 0
    if any(re.search(p, name) for p in OS_PATTERNS.get(platform_info.os, [])):
        score += 100
    else:
        return -1

    if any(re.search(p, name) for p in ARCH_PATTERNS.get(platform_info.arch, [])):
        score += 50

    return score


def find_best_assets(
    assets: list[Asset], platform_info: PlatformInfo | None = None
) -> list[Asset]:
    """Find all matching assets with the highest score for the current platform.

    Returns multiple assets if they tie for the highest score.
    """
    if platform_info is None:
        platform_info = PlatformInfo.detect()

    scored = [(score_asset(asset, platform_info), asset) for asset in assets]
    scored = [(score, asset) for score, asset in scored if score >= 0]
    if not scored:
        return []

    top_score = max(score for score, _ in scored)
    return [asset for score, asset in scored if score == top_score]
