"""Input file watcher — detects operator edits and dispatches handoffs."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from cliprelay.core.fileutil import mtime_ns
from cliprelay.relay.session import RelaySession, is_candidate

log = logging.getLogger(__name__)

# Default polling interval in seconds
_DEFAULT_POLL_INTERVAL = 0.1

# Upper bound on how long the watchdog backend waits between checks
_DEFAULT_EVENT_TIMEOUT = 1.0


class InputWatcher:
    """Poll the input file's mtime and hand new messages to ``on_message``.

    Runs on the caller's thread; ``on_message`` blocks the loop until the
    handoff finishes.
    """

    def __init__(
        self,
        session: RelaySession,
        on_message: Callable[[str], object],
        poll_interval: float = _DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.session = session
        self.poll_interval = poll_interval
        self._on_message = on_message
        self._sleep = sleep
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def check(self) -> bool:
        """Run one detection step. Returns True if a message was dispatched."""
        path = self.session.input_path
        current = mtime_ns(path)
        if current is None:
            return False
        last = self.session.last_mtime
        if last is not None and current <= last:
            return False

        # Record first so a slow handoff doesn't see the same edit twice.
        self.session.last_mtime = current

        try:
            content = self.session.read_input()
        except (OSError, UnicodeDecodeError):
            log.warning("Failed to read input file: %s", path, exc_info=True)
            return False

        if not is_candidate(content):
            log.debug("Ignoring sentinel content in %s: %r", path.name, content)
            return False

        log.info("New message in %s (%d chars)", path.name, len(content))
        self._on_message(content)
        return True

    def run(self) -> None:
        """Poll until the process is killed."""
        self._running = True
        log.info("Polling %s every %.3fs", self.session.input_path, self.poll_interval)
        try:
            while self._running:
                self._sleep(self.poll_interval)
                self.check()
        finally:
            self._running = False

    def stop(self) -> None:
        self._running = False


class WatchdogInputWatcher(InputWatcher):
    """Same detection rules, woken by OS file events instead of a timer.

    Events only wake the loop; the mtime comparison and sentinel filter in
    ``check`` still decide whether a handoff starts, and ``check`` always
    runs on the loop's thread.
    """

    def __init__(
        self,
        session: RelaySession,
        on_message: Callable[[str], object],
        event_timeout: float = _DEFAULT_EVENT_TIMEOUT,
    ) -> None:
        super().__init__(session, on_message)
        self.event_timeout = event_timeout
        self._observer = None
        self._wake = threading.Event()

    def start(self) -> None:
        """Start the watchdog observer on the input file's directory."""
        try:
            from watchdog.observers import Observer
        except ImportError as e:
            raise RuntimeError(
                f"watchdog not installed: {e}. Install with: pip install cliprelay[watch]"
            ) from e

        handler = _ChangeHandler(self)
        self._observer = Observer()
        self._observer.schedule(handler, str(self.session.input_path.parent), recursive=False)
        self._observer.start()
        log.info("Watchdog observer started: %s", self.session.input_path)

    def run(self) -> None:
        if self._observer is None:
            self.start()
        self._running = True
        try:
            while self._running:
                # Timeout covers events the platform drops.
                self._wake.wait(self.event_timeout)
                self._wake.clear()
                self.check()
        finally:
            self._running = False

    def stop(self) -> None:
        super().stop()
        self._wake.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
        log.info("Watchdog observer stopped")

    def _on_fs_event(self, event_type: str, src_path: str) -> None:
        """Called by the watchdog handler from the observer thread."""
        if Path(src_path).name != self.session.input_path.name:
            return
        log.debug("File event %s: %s", event_type, src_path)
        self._wake.set()


class _ChangeHandler:
    """Watchdog event handler that delegates to WatchdogInputWatcher."""

    def __init__(self, watcher: WatchdogInputWatcher) -> None:
        self._watcher = watcher

    def dispatch(self, event) -> None:
        if event.is_directory:
            return

        event_type = event.event_type
        src_path = event.src_path

        if event_type == "moved":
            # Editors that save via rename land on the destination path
            src_path = getattr(event, "dest_path", event.src_path)

        self._watcher._on_fs_event(event_type, str(src_path))


def create_watcher(
    config: dict,
    session: RelaySession,
    on_message: Callable[[str], object],
) -> InputWatcher:
    """Build the watcher for the ``watch.backend`` config value."""
    watch_cfg = config.get("watch", {})
    backend = watch_cfg.get("backend", "poll")
    if backend == "poll":
        return InputWatcher(
            session,
            on_message,
            poll_interval=float(watch_cfg.get("poll_interval", _DEFAULT_POLL_INTERVAL)),
        )
    if backend == "watchdog":
        return WatchdogInputWatcher(session, on_message)
    raise ValueError(f"Unknown watch backend: {backend!r}")
