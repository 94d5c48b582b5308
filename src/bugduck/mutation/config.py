"""
Configuration for bug injection and file application.
"""

from bugduck.paths import get_paths


def get_mutation_config():
    """
    Get mutation configuration with dynamic paths.

    Paths are resolved at runtime to support the .bugduck/ directory structure.
    """
    paths = get_paths()
    return {
        "backup_enabled": True,
        "backup_dir": str(paths.backups_dir),
        "history_db": str(paths.history_db),
        "history_log": str(paths.history_log),
    }
