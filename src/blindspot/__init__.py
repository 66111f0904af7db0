"""blindspot - a package manager for standalone binaries."""

__version__ = "0.4.0"
