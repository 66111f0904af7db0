"""Registry file management for tracking installed packages."""

from collections.abc import Iterable, Iterator
from pathlib import Path

import yaml

from blindspot.core.config import get_config
from blindspot.core.errors import BlindspotError
from blindspot.models.package import Package


REGISTRY_VERSION = 1


class RegistryError(BlindspotError):
    """The registry file is missing or unreadable."""

    pass


class Registry:
    """Installed packages keyed by name, persisted as YAML."""

    def __init__(self, path: Path | None = None, packages: Iterable[Package] = ()):
        self.path = path or get_config().registry_path
        self._packages: dict[str, Package] = {}
        for package in packages:
            self.add(package)

    @classmethod
    def load(cls, path: Path | None = None) -> "Registry":
        """Load the registry from file."""
        registry = cls(path)
        if not registry.path.exists():
            raise RegistryError(
                f"Config file not found (overwrite using the BSPM_CONFIG env var): "
                f"{registry.path}\nTry `blindspot init` if you are running it the first time"
            )

        try:
            with open(registry.path) as f:
                data = yaml.safe_load(f) or {}
            packages_data = data.get("packages") or {}
            for name, pkg_data in packages_data.items():
                registry.add(Package.from_dict(str(name), pkg_data))
        except OSError as e:
            raise RegistryError(f"Failed to read config file: {registry.path}: {e}") from e
        except (yaml.YAMLError, AttributeError, KeyError, TypeError, ValueError) as e:
            raise RegistryError(f"Invalid config file: {registry.path}: {e}") from e

        return registry

    def exists(self) -> bool:
        return self.path.exists()

    def save(self) -> None:
        """Save registry to file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": REGISTRY_VERSION,
            "packages": {
                name: pkg.to_dict() for name, pkg in self._packages.items()
            },
        }

        try:
            with open(self.path, "w") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise RegistryError(f"Can not write to file: {self.path}: {e}") from e

    def get(self, name: str) -> Package | None:
        """Get a package by name."""
        return self._packages.get(name)

    def add(self, package: Package) -> None:
        """Add a package, replacing any package with the same name."""
        self._packages[package.name] = package

    def remove(self, name: str) -> Package | None:
        """Remove a package by name."""
        return self._packages.pop(name, None)

    def merge(self, packages: Iterable[Package]) -> list[str]:
        """Replace installed packages by the given updated versions.

        Packages whose name is not installed are ignored. Returns the names
        that were replaced.
        """
        replaced = []
        for package in packages:
            if package.name in self._packages:
                self._packages[package.name] = package
                replaced.append(package.name)
        return replaced

    def list_packages(self) -> list[Package]:
        """List all installed packages."""
        return list(self._packages.values())

    def names(self) -> list[str]:
        return list(self._packages)

    def has(self, name: str) -> bool:
        """Check if a package is installed."""
        return name in self._packages

    def __len__(self) -> int:
        return len(self._packages)

    def __iter__(self) -> Iterator[Package]:
        return iter(list(self._packages.values()))
