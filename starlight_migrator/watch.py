"""Watch mode: re-run the conversion when GitBook sources change."""

import logging
import os
import time
from typing import Callable, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer


logger = logging.getLogger(__name__)


class MarkdownChangeHandler(FileSystemEventHandler):
    """Calls ``on_change`` whenever a visible .md file is created or modified.

    Args:
        source_dir: Root of the GitBook repo being watched
        on_change: Callback that re-runs the conversion
        debounce_seconds: Minimum delay between two runs
        ignore_paths: Files the conversion itself writes (e.g. the QA report)
    """

    def __init__(self, source_dir: str, on_change: Callable[[], None], debounce_seconds: float = 1.0,
                 ignore_paths: Optional[list] = None):
        self.source_dir = os.path.abspath(source_dir)
        self.on_change = on_change
        self.debounce_seconds = debounce_seconds
        self.ignore_paths = {os.path.abspath(p) for p in ignore_paths or []}
        self._last_run = 0.0

    def should_process(self, file_path: str) -> bool:
        """Check if a change to ``file_path`` should trigger a run."""
        if not file_path.endswith('.md'):
            return False

        abs_path = os.path.abspath(file_path)
        if abs_path in self.ignore_paths:
            logger.debug(f"Skipping {file_path}: written by the conversion")
            return False

        rel_path = os.path.relpath(abs_path, self.source_dir)
        if any(part.startswith('.') for part in rel_path.split(os.sep)):
            logger.debug(f"Skipping {file_path}: hidden path")
            return False

        if time.time() - self._last_run < self.debounce_seconds:
            logger.debug(f"Skipping {file_path}: debounce delay not met")
            return False

        return True

    def _handle(self, file_path: str):
        if not self.should_process(file_path):
            return
        logger.info(f"File changed: {file_path}")
        try:
            self.on_change()
        except OSError as e:
            logger.error(f"Conversion failed after change to {file_path}: {e}")
        except Exception as e:
            logger.error(f"Unexpected error after change to {file_path}: {e!r}")
        finally:
            # The debounce window starts when the run ends
            self._last_run = time.time()

    def on_modified(self, event):
        if not event.is_directory:
            self._handle(event.src_path)

    def on_created(self, event):
        if not event.is_directory:
            self._handle(event.src_path)

    def on_moved(self, event):
        if not event.is_directory:
            self._handle(event.dest_path)


def run_watch_mode(source_dir: str, on_change: Callable[[], None], debounce: float = 1.0,
                   ignore_paths: Optional[list] = None):
    """Block until Ctrl+C, re-running ``on_change`` on every source change."""
    handler = MarkdownChangeHandler(source_dir, on_change, debounce_seconds=debounce, ignore_paths=ignore_paths)
    observer = Observer()
    observer.schedule(handler, source_dir, recursive=True)
    observer.start()

    print(f"👀 Watching {source_dir} for changes. Press Ctrl+C to stop.")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nStopping watch mode...")
        observer.stop()

    observer.join()
