"""Configuration and path management for blindspot."""

from pathlib import Path
from dataclasses import dataclass
import os
import tempfile


DEFAULT_JOBS = 8


def _xdg_dir(variable: str, fallback: Path) -> Path:
    value = os.environ.get(variable)
    return Path(value) if value else fallback


@dataclass
class BlindspotConfig:
    """Configuration for the blindspot package manager."""

    registry_path: Path
    bin_dir: Path
    data_dir: Path
    scratch_dir: Path
    log_path: Path
    jobs: int = DEFAULT_JOBS

    @classmethod
    def default(cls) -> "BlindspotConfig":
        """Create config from the environment, falling back to platform defaults."""
        home = Path.home()
        config_home = _xdg_dir("XDG_CONFIG_HOME", home / ".config")
        data_home = _xdg_dir("XDG_DATA_HOME", home / ".local" / "share")

        registry_path = Path(
            os.environ.get("BSPM_CONFIG", config_home / "blindspot" / "bspm.yaml")
        )
        bin_dir = Path(os.environ.get("BSPM_BIN_DIR", home / ".local" / "bin"))
        data_dir = Path(os.environ.get("BSPM_DATA_DIR", data_home / "blindspot"))
        log_path = Path(os.environ.get("BSPM_LOG_FILE", data_dir / "blindspot.log"))

        try:
            jobs = int(os.environ.get("BSPM_JOBS", DEFAULT_JOBS))
        except ValueError:
            jobs = DEFAULT_JOBS

        return cls(
            registry_path=registry_path,
            bin_dir=bin_dir,
            data_dir=data_dir,
            scratch_dir=Path(tempfile.gettempdir()) / "blindspot",
            log_path=log_path,
            jobs=max(jobs, 1),
        )

    def ensure_dirs(self) -> None:
        """Ensure all required directories exist."""
        self.registry_path.parent.mkdir(parents=True, exist_ok=True)
        self.bin_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.scratch_dir.mkdir(parents=True, exist_ok=True)


# Global config instance
_config: BlindspotConfig | None = None


def get_config() -> BlindspotConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = BlindspotConfig.default()
    return _config


def set_config(config: BlindspotConfig | None) -> None:
    """Set a custom configuration (useful for testing)."""
    global _config
    _config = config
