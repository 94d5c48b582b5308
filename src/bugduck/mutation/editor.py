"""
CodeEditor: Apply mutated source to disk with backups and atomic writes.
"""

import hashlib
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from bugduck.logging_config import logger
from .config import get_mutation_config
from .printer import detect_line_ending, normalize_line_endings


def content_hash(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class CodeEditor:
    """
    Write whole-file replacements safely.

    Features:
    - Timestamped backup before every write
    - Atomic writes (temp file + rename)
    - UTF-8 encoding handling
    - Line ending preservation (LF/CRLF)
    """

    def __init__(self, config: Optional[dict] = None):
        """
        Initialize code editor with optional config.

        Args:
            config: Optional config overrides (merges with get_mutation_config())
        """
        self.config = {**get_mutation_config(), **(config or {})}
        self._ensure_backup_dir()

    def _ensure_backup_dir(self):
        if self.config["backup_enabled"]:
            Path(self.config["backup_dir"]).mkdir(parents=True, exist_ok=True)

    def read(self, file_path: str) -> str:
        """Read a file as text without translating its line endings."""
        with open(file_path, "r", encoding="utf-8", newline="") as f:
            return f.read()

    def write(self, file_path: str, new_content: str) -> Tuple[bool, Optional[str]]:
        """
        Replace a file's content.

        Args:
            file_path: Path to file
            new_content: Full replacement text

        Returns:
            (success, backup_path)
        """
        path = Path(file_path)

        try:
            original_content = self.read(str(path))
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {file_path}: {e}")
            return False, None

        backup_path = None
        if self.config["backup_enabled"]:
            backup_path = self.create_backup(str(path))
            if not backup_path:
                logger.error("Backup creation failed, aborting write")
                return False, None

        line_ending = detect_line_ending(original_content)
        modified_content = normalize_line_endings(new_content, line_ending)

        success = self._atomic_write(str(path), modified_content)
        if success:
            logger.info(f"Wrote mutated source to {file_path}")
        else:
            logger.error(f"Failed to write changes to {file_path}")
            if backup_path:
                self._restore_backup(backup_path, str(path))

        return success, backup_path

    def create_backup(self, file_path: str) -> Optional[str]:
        """
        Create a timestamped backup of a file.

        Returns:
            Path to backup file or None if failed
        """
        path = Path(file_path)
        if not path.exists():
            logger.error(f"Cannot backup non-existent file: {file_path}")
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        backup_path = Path(self.config["backup_dir"]) / f"{path.name}.{timestamp}.backup"

        try:
            shutil.copy2(str(path), str(backup_path))
            logger.debug(f"Created backup: {backup_path}")
            return str(backup_path)
        except OSError as e:
            logger.error(f"Failed to create backup: {e}")
            return None

    def list_backups(self, file_path: str) -> List[Path]:
        """Backups for a file, newest first."""
        backup_dir = Path(self.config["backup_dir"])
        if not backup_dir.exists():
            return []
        name = Path(file_path).name
        # Timestamps sort lexically, so the name order is the time order
        return sorted(backup_dir.glob(f"{name}.*.backup"), key=lambda p: p.name, reverse=True)

    def restore_latest(self, file_path: str) -> Optional[str]:
        """
        Restore the most recent backup of a file.

        Returns:
            The backup that was restored, or None when there is none.
        """
        backups = self.list_backups(file_path)
        if not backups:
            logger.warning(f"No backup found for {file_path}")
            return None
        latest = str(backups[0])
        if self._restore_backup(latest, file_path):
            return latest
        return None

    def _atomic_write(self, file_path: str, content: str) -> bool:
        path = Path(file_path)

        try:
            # Same directory as the target so the rename stays on one filesystem
            fd, temp_path = tempfile.mkstemp(
                dir=str(path.parent),
                prefix=f".{path.name}.",
                suffix=".tmp"
            )
        except OSError as e:
            logger.error(f"Failed to create temp file: {e}")
            return False

        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            if path.exists():
                shutil.copymode(str(path), temp_path)
            os.replace(temp_path, str(path))
            logger.debug(f"Atomic write completed: {file_path}")
            return True
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            logger.error(f"Failed during atomic write: {e}")
            return False

    def _restore_backup(self, backup_path: str, target_path: str) -> bool:
        try:
            shutil.copy2(backup_path, target_path)
            logger.info(f"Restored {target_path} from backup")
            return True
        except OSError as e:
            logger.error(f"Failed to restore backup: {e}")
            return False
