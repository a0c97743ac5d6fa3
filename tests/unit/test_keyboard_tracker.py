from datetime import datetime, timedelta, timezone
import threading
from unittest.mock import MagicMock, patch

from inputlog.capture.clock import MonotonicClock
from inputlog.capture.keyboard_tracker import KeyboardTracker
from inputlog.event_source.manual_adapter import ManualEventSource
from inputlog.obfuscation.rot13 import Rot13Obfuscator
from inputlog.event_source.models import SpecialKey
from inputlog.storage.models import Category, InputLog, InputType


def _make_tracker() -> tuple[KeyboardTracker, ManualEventSource, MagicMock]:
    source = ManualEventSource()
    repo = MagicMock()
    tracker = KeyboardTracker(source, repo, Rot13Obfuscator())
    return tracker, source, repo


def _saved_logs(repo: MagicMock) -> list[InputLog]:
    return [call.args[0] for call in repo.save.call_args_list]


def _type(source: ManualEventSource, text: str) -> None:
    for char in text:
        source.emit(char)


class TestKeyboardTrackerFlush:
    def test_flushes_obfuscated_sentence(self) -> None:
        tracker, source, repo = _make_tracker()
        tracker.start()

        _type(source, "hi. ")

        logs = _saved_logs(repo)
        assert len(logs) == 1
        assert logs[0].content == "uv."
        assert logs[0].category == Category.KEYBOARD

    def test_notifies_listeners_with_plain_text(self) -> None:
        tracker, source, _repo = _make_tracker()
        heard: list[str] = []
        tracker.add_listener(heard.append)
        tracker.start()

        _type(source, "Hello world. ")

        assert heard == ["Hello world."]

    def test_failing_listener_does_not_block_persistence(self) -> None:
        tracker, source, repo = _make_tracker()
        tracker.add_listener(MagicMock(side_effect=RuntimeError("boom")))
        tracker.start()

        _type(source, "a\r")

        assert repo.save.call_count == 1

    def test_handles_multi_character_events(self) -> None:
        tracker, source, repo = _make_tracker()
        tracker.start()

        source.emit("ok. ")

        assert [log.content for log in _saved_logs(repo)] == ["bx."]

    def test_records_get_distinct_ids(self) -> None:
        tracker, source, repo = _make_tracker()
        tracker.start()

        _type(source, "One. Two. ")

        ids = [log.id for log in _saved_logs(repo)]
        assert len(ids) == 2
        assert len(set(ids)) == 2


class TestKeyboardTrackerStop:
    def test_stop_flushes_buffer_before_releasing_source(self) -> None:
        source = MagicMock()
        repo = MagicMock()
        parent = MagicMock()
        parent.attach_mock(source, "source")
        parent.attach_mock(repo, "repo")
        tracker = KeyboardTracker(source, repo, Rot13Obfuscator())
        tracker.start()
        handler = source.start.call_args.args[0]
        handler("a")
        handler("b")

        tracker.stop()

        names = [call[0] for call in parent.mock_calls]
        assert names.index("repo.save") < names.index("source.stop")
        assert repo.save.call_args.args[0].content == "no"

    def test_stop_without_start_is_noop(self) -> None:
        source = MagicMock()
        repo = MagicMock()
        tracker = KeyboardTracker(source, repo, Rot13Obfuscator())

        tracker.stop()

        source.stop.assert_not_called()
        repo.save.assert_not_called()

    def test_stop_twice_flushes_once(self) -> None:
        tracker, source, repo = _make_tracker()
        tracker.start()
        _type(source, "pending")

        tracker.stop()
        tracker.stop()

        assert repo.save.call_count == 1
        assert not source.is_running

    def test_events_after_stop_are_ignored(self) -> None:
        tracker, _source, repo = _make_tracker()
        tracker.start()
        tracker.stop()

        tracker.on_text("late. ")

        repo.save.assert_not_called()

    def test_failed_start_leaves_tracker_stopped(self) -> None:
        source = MagicMock()
        source.start.side_effect = RuntimeError("no hook")
        tracker = KeyboardTracker(source, MagicMock(), Rot13Obfuscator())

        try:
            tracker.start()
        except RuntimeError:
            pass

        assert not tracker.is_running

class TestKeyboardTrackerSpecialKeys:
    def test_special_key_is_saved_as_its_own_record(self) -> None:
        tracker, source, repo = _make_tracker()
        tracker.start()

        source.emit(SpecialKey("ctrl+c"))

        logs = _saved_logs(repo)
        assert len(logs) == 1
        assert logs[0].content == "pgey+p"
        assert logs[0].input_type is InputType.SPECIAL
        assert logs[0].category == Category.KEYBOARD

    def test_buffered_text_is_flushed_before_the_special_key(self) -> None:
        tracker, source, repo = _make_tracker()
        heard: list[str] = []
        tracker.add_listener(heard.append)
        tracker.start()

        _type(source, "half typed")
        source.emit(SpecialKey("enter"))

        logs = _saved_logs(repo)
        assert [(log.content, log.input_type) for log in logs] == [
            ("unys glcrq", InputType.TEXT),
            ("ragre", InputType.SPECIAL),
        ]
        assert heard == ["half typed"]

    def test_special_key_after_stop_is_ignored(self) -> None:
        tracker, _source, repo = _make_tracker()
        tracker.start()
        tracker.stop()

        tracker.on_key(SpecialKey("tab"))

        repo.save.assert_not_called()


class TestKeyboardTrackerOrdering:
    def test_stop_waits_for_an_in_flight_flush(self) -> None:
        saved: list[str] = []
        first_save_started = threading.Event()
        release_first_save = threading.Event()

        def slow_save(log: InputLog) -> None:
            if not saved and not first_save_started.is_set():
                first_save_started.set()
                release_first_save.wait(timeout=5)
            saved.append(Rot13Obfuscator().decode(log.content) or "")

        source = ManualEventSource()
        repo = MagicMock()
        repo.save.side_effect = slow_save
        tracker = KeyboardTracker(source, repo, Rot13Obfuscator())
        tracker.start()

        typing = threading.Thread(target=source.emit, args=("one. two",))
        typing.start()
        assert first_save_started.wait(timeout=5)
        stopping = threading.Thread(target=tracker.stop)
        stopping.start()
        stopping.join(timeout=0.2)
        release_first_save.set()
        typing.join(timeout=5)
        stopping.join(timeout=5)

        assert saved == ["one.", "two"]


class TestMonotonicClock:
    def test_never_goes_backwards(self) -> None:
        tz = timezone(timedelta(hours=2))
        later = datetime(2026, 10, 16, 10, 0, tzinfo=tz)
        earlier = datetime(2026, 10, 16, 9, 0, tzinfo=tz)
        clock = MonotonicClock()
        with patch("inputlog.capture.clock.datetime") as mock_datetime:
            mock_datetime.now.return_value.astimezone.side_effect = [later, earlier]
            first = clock.now()
            second = clock.now()
        assert first == later
        assert second == later

    def test_returns_aware_datetimes(self) -> None:
        assert MonotonicClock().now().tzinfo is not None
