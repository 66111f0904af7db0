"""Error hierarchy shared by the core modules."""


class BlindspotError(Exception):
    """Base class for failures of a single package operation."""

    pass


class CorruptedPackageError(BlindspotError):
    """Stored package state contradicts itself."""

    pass


class InvalidUrlError(BlindspotError):
    """A stored or given URL cannot be parsed."""

    pass
