import sys
import os
from loguru import logger

# Flag to track if logging has been configured
_logging_configured = False


def setup_logging(level="INFO", suppress_console=None, enable_file_logging=None):
    """
    Configures the global logger.

    Console logging is on unless machine mode is active. File logging is opt-in
    via BUGDUCK_FILE_LOGGING=1 or enable_file_logging=True.

    Args:
        level: Logging level (default: INFO)
        suppress_console: If True, suppress console logging. If None, check BUGDUCK_MACHINE_MODE env var.
        enable_file_logging: If True, enable file logging. If None, check BUGDUCK_FILE_LOGGING env var.
    """
    global _logging_configured

    # An explicit call always wins over the import-time default
    explicit = suppress_console is not None or enable_file_logging is not None or level != "INFO"
    if _logging_configured and not explicit:
        return
    _logging_configured = True

    logger.remove()

    if suppress_console is None:
        suppress_console = os.getenv("BUGDUCK_MACHINE_MODE", "").lower() in ("1", "true", "yes")

    # Stream 1: Human-readable console output (only if not suppressed)
    if not suppress_console:
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
            colorize=True
        )

    # Stream 2: File logging is opt-in only
    if enable_file_logging is None:
        enable_file_logging = os.getenv("BUGDUCK_FILE_LOGGING", "").lower() in ("1", "true", "yes")

    if enable_file_logging:
        from bugduck.paths import get_paths
        paths = get_paths()
        paths.ensure_dirs()

        logger.add(
            paths.logs_dir / "bugduck.log",
            level="INFO",
            rotation="5 MB",
            retention="7 days",
            compression="gz",
            catch=True,
            serialize=False
        )


# Configure the logger on import (will check env var for machine mode)
setup_logging()
