"""
bugduck Path Configuration

Centralized path management for all bugduck data files.
All paths are relative to the project root (current working directory).

Directory Structure:
.bugduck/
├── config.json          # Local config overrides
├── history.db           # Injection history (key-value)
├── history.jsonl        # Append-only injection log
├── backups/             # Pre-injection file backups
└── logs/                # Log files
"""

from pathlib import Path
from typing import Optional


class BugDuckPaths:
    """
    Centralized path configuration for bugduck.

    All paths are lazily resolved relative to project_root.
    Default project_root is current working directory.
    """

    BUGDUCK_DIR = ".bugduck"

    HISTORY_DB_NAME = "history.db"
    HISTORY_LOG_NAME = "history.jsonl"
    CONFIG_NAME = "config.json"

    BACKUPS_DIR = "backups"
    LOGS_DIR = "logs"

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize paths configuration.

        Args:
            project_root: Root directory for the project. Defaults to CWD.
        """
        self._project_root = project_root

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        if self._project_root is None:
            return Path.cwd()
        return self._project_root

    @property
    def bugduck_dir(self) -> Path:
        """Get the .bugduck directory path."""
        return self.project_root / self.BUGDUCK_DIR

    @property
    def history_db(self) -> Path:
        return self.bugduck_dir / self.HISTORY_DB_NAME

    @property
    def history_log(self) -> Path:
        return self.bugduck_dir / self.HISTORY_LOG_NAME

    @property
    def local_config(self) -> Path:
        return self.bugduck_dir / self.CONFIG_NAME

    @property
    def global_config(self) -> Path:
        # Resolved per call so a changed HOME is honoured
        return Path.home() / self.BUGDUCK_DIR / self.CONFIG_NAME

    @property
    def backups_dir(self) -> Path:
        return self.bugduck_dir / self.BACKUPS_DIR

    @property
    def logs_dir(self) -> Path:
        return self.bugduck_dir / self.LOGS_DIR

    def ensure_dirs(self) -> None:
        """Create all necessary directories if they don't exist."""
        self.bugduck_dir.mkdir(parents=True, exist_ok=True)
        self.backups_dir.mkdir(exist_ok=True)
        self.logs_dir.mkdir(exist_ok=True)


# Global instance for convenience
_default_paths: Optional[BugDuckPaths] = None


def get_paths(project_root: Optional[Path] = None) -> BugDuckPaths:
    """
    Get the paths configuration.

    Args:
        project_root: Optional project root override

    Returns:
        BugDuckPaths instance
    """
    global _default_paths
    if project_root is not None:
        return BugDuckPaths(project_root)
    if _default_paths is None:
        _default_paths = BugDuckPaths()
    return _default_paths


def reset_paths() -> None:
    """Reset the global paths instance (useful for testing)."""
    global _default_paths
    _default_paths = None
