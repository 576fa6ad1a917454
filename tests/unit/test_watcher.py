"""Tests for cliprelay.relay.watcher — InputWatcher and WatchdogInputWatcher."""

import os
import time
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from cliprelay.core.models import Turn
from cliprelay.core.transcript import DEFAULT_GREETING, TranscriptStore, decode
from cliprelay.relay.console import Console
from cliprelay.relay.handoff import HandoffMachine
from cliprelay.relay.session import COMPLETED, LOADING, RelaySession
from cliprelay.relay.watcher import (
    InputWatcher,
    WatchdogInputWatcher,
    _ChangeHandler,
    create_watcher,
)

_SECOND = 1_000_000_000


def _write(path: Path, content: str, age_seconds: int) -> int:
    """Write content and pin its mtime ``age_seconds`` in the past."""
    path.write_text(content, encoding="utf-8")
    ts = time.time_ns() - age_seconds * _SECOND
    os.utime(path, ns=(ts, ts))
    return ts


def _session(tmp_path: Path, initial: str = "") -> RelaySession:
    input_path = tmp_path / "input.md"
    _write(input_path, initial, age_seconds=100)
    store = TranscriptStore(tmp_path / ".agent" / "conversation.txt")
    return RelaySession.open(store, input_path)


class TestInputWatcherInit:
    def test_defaults(self, tmp_path: Path):
        w = InputWatcher(_session(tmp_path), MagicMock())
        assert w.poll_interval == 0.1
        assert not w.is_running


class TestCheck:
    def test_no_change(self, tmp_path: Path):
        on_message = MagicMock()
        w = InputWatcher(_session(tmp_path), on_message)
        assert w.check() is False
        on_message.assert_not_called()

    def test_existing_content_not_replayed(self, tmp_path: Path):
        on_message = MagicMock()
        w = InputWatcher(_session(tmp_path, initial="left over from last run"), on_message)
        assert w.check() is False
        on_message.assert_not_called()

    def test_dispatches_new_message(self, tmp_path: Path):
        session = _session(tmp_path)
        on_message = MagicMock()
        w = InputWatcher(session, on_message)

        ts = _write(session.input_path, "  What is 2+2?\n", age_seconds=50)

        assert w.check() is True
        on_message.assert_called_once_with("What is 2+2?")
        assert session.last_mtime == ts

    def test_same_event_not_reprocessed(self, tmp_path: Path):
        session = _session(tmp_path)
        on_message = MagicMock()
        w = InputWatcher(session, on_message)
        _write(session.input_path, "hello", age_seconds=50)

        assert w.check() is True
        assert w.check() is False
        assert on_message.call_count == 1

    def test_timestamp_recorded_before_dispatch(self, tmp_path: Path):
        session = _session(tmp_path)
        seen = []
        w = InputWatcher(session, lambda _m: seen.append(session.last_mtime))
        ts = _write(session.input_path, "hello", age_seconds=50)

        w.check()
        assert seen == [ts]

    def test_older_timestamp_ignored(self, tmp_path: Path):
        session = _session(tmp_path)
        on_message = MagicMock()
        w = InputWatcher(session, on_message)
        _write(session.input_path, "from the past", age_seconds=500)

        assert w.check() is False
        on_message.assert_not_called()

    @pytest.mark.parametrize("content", ["", "   \n", LOADING, COMPLETED])
    def test_sentinel_suppression(self, tmp_path: Path, content):
        session = _session(tmp_path, initial="real message")
        on_message = MagicMock()
        w = InputWatcher(session, on_message)
        ts = _write(session.input_path, content, age_seconds=50)

        assert w.check() is False
        on_message.assert_not_called()
        # The timestamp still advances so the sentinel is seen only once
        assert session.last_mtime == ts

    def test_missing_file(self, tmp_path: Path):
        session = _session(tmp_path)
        session.input_path.unlink()
        w = InputWatcher(session, MagicMock())
        assert w.check() is False

    def test_file_reappears(self, tmp_path: Path):
        session = _session(tmp_path)
        session.input_path.unlink()
        session.last_mtime = None
        on_message = MagicMock()
        w = InputWatcher(session, on_message)

        assert w.check() is False
        _write(session.input_path, "back again", age_seconds=10)
        assert w.check() is True
        on_message.assert_called_once_with("back again")

    def test_unreadable_file(self, tmp_path: Path):
        session = _session(tmp_path)
        on_message = MagicMock()
        w = InputWatcher(session, on_message)
        session.input_path.write_bytes(b"\xff\xfe\xfa")

        assert w.check() is False
        on_message.assert_not_called()


class TestRun:
    def test_polls_until_stopped(self, tmp_path: Path):
        session = _session(tmp_path)
        on_message = MagicMock()
        sleeps = []
        w = None

        def fake_sleep(seconds):
            sleeps.append(seconds)
            if len(sleeps) == 2:
                _write(session.input_path, "hello", age_seconds=50)
            if len(sleeps) == 4:
                w.stop()

        w = InputWatcher(session, on_message, poll_interval=0.1, sleep=fake_sleep)
        w.run()

        assert sleeps == [0.1, 0.1, 0.1, 0.1]
        on_message.assert_called_once_with("hello")
        assert not w.is_running

    def test_interrupt_propagates(self, tmp_path: Path):
        w = InputWatcher(
            _session(tmp_path), MagicMock(), sleep=MagicMock(side_effect=KeyboardInterrupt)
        )
        with pytest.raises(KeyboardInterrupt):
            w.run()
        assert not w.is_running


class TestEndToEnd:
    def test_one_cycle(self, tmp_path: Path):
        session = _session(tmp_path)
        clipboard = MagicMock()
        clipboard.read.return_value = "4"
        console = MagicMock(spec=Console)
        machine = HandoffMachine(session, clipboard, console, sleep=lambda _s: None)
        w = InputWatcher(session, machine.run)

        _write(session.input_path, "What is 2+2?", age_seconds=50)
        assert w.check() is True

        transcript = decode(session.store.path.read_text(encoding="utf-8"))
        assert transcript == [
            Turn.assistant(DEFAULT_GREETING),
            Turn.user("What is 2+2?"),
            Turn.assistant("4"),
        ]
        assert session.input_path.read_text(encoding="utf-8") == COMPLETED

        # The relay's own sentinel write must not start another handoff
        assert w.check() is False
        assert clipboard.write.call_count == 1


class TestChangeHandler:
    def _watcher(self, tmp_path: Path) -> WatchdogInputWatcher:
        return WatchdogInputWatcher(_session(tmp_path), MagicMock())

    def test_dispatch_wakes_watcher(self, tmp_path: Path):
        w = self._watcher(tmp_path)
        handler = _ChangeHandler(w)

        event = MagicMock()
        event.is_directory = False
        event.event_type = "modified"
        event.src_path = str(tmp_path / "input.md")

        handler.dispatch(event)
        assert w._wake.is_set()

    def test_moved_uses_destination(self, tmp_path: Path):
        w = self._watcher(tmp_path)
        handler = _ChangeHandler(w)

        event = MagicMock()
        event.is_directory = False
        event.event_type = "moved"
        event.src_path = str(tmp_path / ".tmp_abc.md")
        event.dest_path = str(tmp_path / "input.md")

        handler.dispatch(event)
        assert w._wake.is_set()

    def test_ignores_other_files(self, tmp_path: Path):
        w = self._watcher(tmp_path)
        handler = _ChangeHandler(w)

        event = MagicMock()
        event.is_directory = False
        event.event_type = "modified"
        event.src_path = str(tmp_path / "notes.md")

        handler.dispatch(event)
        assert not w._wake.is_set()

    def test_skips_directories(self, tmp_path: Path):
        w = self._watcher(tmp_path)
        handler = _ChangeHandler(w)

        event = MagicMock()
        event.is_directory = True

        handler.dispatch(event)
        assert not w._wake.is_set()


class TestWatchdogStartStop:
    def test_start_and_stop(self, tmp_path: Path):
        """Start and stop with the real watchdog library (if installed)."""
        w = WatchdogInputWatcher(_session(tmp_path), MagicMock())
        try:
            w.start()
            w.stop()
            assert not w.is_running
        except RuntimeError:
            # watchdog not installed, fine for CI
            pass

    def test_stop_idempotent(self, tmp_path: Path):
        w = WatchdogInputWatcher(_session(tmp_path), MagicMock())
        w.stop()
        assert not w.is_running

    def test_run_checks_after_wake(self, tmp_path: Path):
        session = _session(tmp_path)
        on_message = MagicMock()
        w = WatchdogInputWatcher(session, on_message, event_timeout=0.01)
        w._observer = MagicMock()

        def stop_after_dispatch(message):
            w._running = False

        on_message.side_effect = stop_after_dispatch
        _write(session.input_path, "hello", age_seconds=50)
        w._wake.set()
        w.run()

        on_message.assert_called_once_with("hello")


class TestCreateWatcher:
    def test_poll_backend(self, tmp_path: Path):
        config = {"watch": {"backend": "poll", "poll_interval": 0.25}}
        w = create_watcher(config, _session(tmp_path), MagicMock())
        assert type(w) is InputWatcher
        assert w.poll_interval == 0.25

    def test_watchdog_backend(self, tmp_path: Path):
        w = create_watcher({"watch": {"backend": "watchdog"}}, _session(tmp_path), MagicMock())
        assert isinstance(w, WatchdogInputWatcher)

    def test_unknown_backend(self, tmp_path: Path):
        with pytest.raises(ValueError, match="Unknown watch backend"):
            create_watcher({"watch": {"backend": "inotify-magic"}}, _session(tmp_path), MagicMock())
