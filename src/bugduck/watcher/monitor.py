"""
On-save injection using watchdog.

Every save of a supported source file under the watched directory gets a
small random number of bugs. Events are debounced per path; the EditGuard
swallows the event caused by our own write.
"""

import random
import signal
import threading
import time
from fnmatch import fnmatch
from pathlib import Path
from typing import Dict, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from bugduck.exceptions import ParseFailure, PrinterError
from bugduck.history import HistoryLedger
from bugduck.logging_config import logger
from bugduck.mutation import CodeEditor, inject_bugs, is_supported_file
from bugduck.mutation.editor import content_hash
from bugduck.schemas import InjectionResult
from bugduck.user_config import UserConfig, get_user_config
from .config import MONITORING_CONFIG, WATCHER_CONFIG
from .guard import EditGuard


class SaveHandler(FileSystemEventHandler):
    """
    Collects save events and injects bugs into each saved file once it has
    been quiet for ``debounce_delay`` seconds.
    """

    def __init__(
        self,
        project_path: Path,
        rng: Optional[random.Random] = None,
        user_config: Optional[UserConfig] = None,
        editor: Optional[CodeEditor] = None,
        ledger: Optional[HistoryLedger] = None,
        guard: Optional[EditGuard] = None,
        debounce_delay: float = WATCHER_CONFIG["debounce_delay"],
        roast: bool = WATCHER_CONFIG["roast_on_save"],
    ):
        self.project_path = Path(project_path).resolve()
        self.rng = rng or random.Random()
        self.user_config = user_config or get_user_config()
        self.editor = editor or CodeEditor({"backup_enabled": bool(self.user_config.get("backup.enabled", True))})
        self.ledger = ledger
        if self.ledger is None and self.user_config.get("history.enabled", True):
            self.ledger = HistoryLedger()
        self.guard = guard or EditGuard()
        self.debounce_delay = debounce_delay
        self.roast = roast and bool(self.user_config.get("commentary.enabled", True))

        self._lock = threading.Lock()
        self.pending: Dict[str, float] = {}
        # Last content seen per path, so duplicate events for one save are dropped
        self._last_seen: Dict[str, str] = {}

        # Statistics
        self.events_processed = 0
        self.injections = 0

        logger.info(f"Save handler initialized for {self.project_path}")

    def should_ignore_path(self, path: str) -> bool:
        if not is_supported_file(path):
            return True
        try:
            rel_path = Path(path).resolve().relative_to(self.project_path)
        except ValueError:
            return True
        rel = "/" + rel_path.as_posix()
        return any(fnmatch(rel, pattern) for pattern in MONITORING_CONFIG["ignore_patterns"])

    def _track(self, path: str) -> None:
        if self.should_ignore_path(path):
            return
        with self._lock:
            self.pending[path] = time.time()
            self.events_processed += 1
        logger.debug(f"Save event: {path}")

    def on_modified(self, event: FileSystemEvent):
        if not event.is_directory:
            self._track(event.src_path)

    def on_created(self, event: FileSystemEvent):
        if not event.is_directory:
            self._track(event.src_path)

    def on_moved(self, event: FileSystemEvent):
        # Editors that save via rename deliver the file as the move target
        if not event.is_directory:
            self._track(event.dest_path)

    def flush(self, force: bool = False) -> int:
        """
        Process every path whose debounce window has passed.

        Returns:
            Number of paths processed
        """
        now = time.time()
        with self._lock:
            ready = [p for p, t in self.pending.items() if force or now - t >= self.debounce_delay]
            for path in ready:
                del self.pending[path]

        for path in ready:
            self.process(path)
        return len(ready)

    def process(self, path: str) -> Optional[InjectionResult]:
        """
        Inject bugs into one saved file.

        Returns:
            The InjectionResult, or None when the event was skipped
        """
        try:
            content = self.editor.read(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

        if not self.guard.should_react(path, content):
            self._last_seen[path] = content_hash(content)
            return None

        digest = content_hash(content)
        if self._last_seen.get(path) == digest:
            logger.debug(f"No change since last event for {path}")
            return None
        self._last_seen[path] = digest

        count = self.rng.choice(self.user_config.bugs_per_save_choices)
        try:
            result = inject_bugs(
                content,
                count,
                file_path=path,
                rng=self.rng,
                weights=self.user_config.get("mutation.weights"),
            )
        except ParseFailure as e:
            logger.warning(f"Skipping {path}: {e}")
            return None
        except PrinterError as e:
            logger.error(f"Could not regenerate {path}: {e}")
            return None

        if result.nothing_to_break:
            logger.info(f"Nothing to break in {path}")
            return result

        self.guard.begin_own_edit(path, result.code)
        success, _ = self.editor.write(path, result.code)
        if not success:
            self.guard.abort(path)
            return None
        self._last_seen[path] = content_hash(result.code)
        self.injections += 1

        bugs = ", ".join(str(b) for b in result.applied)
        logger.info(f"Injected {len(result.applied)} bug(s) into {path}: {bugs}")

        if self.ledger is not None and result.diff is not None:
            self.ledger.record(HistoryLedger.build_entry(path, result.applied, result.diff))

        if self.roast:
            threading.Thread(target=self._log_roast, args=(list(result.applied),), daemon=True).start()

        return result

    def _log_roast(self, bugs) -> None:
        from bugduck.commentary import get_duck_roast
        logger.info(f"🦆 {get_duck_roast(bugs)}")


def watch(
    project_path: Path,
    rng: Optional[random.Random] = None,
    roast: bool = WATCHER_CONFIG["roast_on_save"],
) -> SaveHandler:
    """
    Inject bugs on every save under ``project_path`` until interrupted.

    Returns:
        The handler, for its statistics
    """
    project_path = Path(project_path).resolve()

    shutdown_requested = False

    def signal_handler(signum, frame):
        nonlocal shutdown_requested
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        shutdown_requested = True

    signal.signal(signal.SIGTERM, signal_handler)

    handler = SaveHandler(project_path, rng=rng, roast=roast)

    observer = Observer()
    observer.schedule(handler, str(project_path), recursive=MONITORING_CONFIG["recursive"])
    observer.start()
    logger.info(f"Watching {project_path} for saves...")

    try:
        while not shutdown_requested:
            time.sleep(WATCHER_CONFIG["poll_interval"])
            handler.flush()
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        observer.stop()
        observer.join()
        logger.info(
            f"Watcher stopped. Processed {handler.events_processed} events, "
            f"injected into {handler.injections} saves"
        )

    return handler
