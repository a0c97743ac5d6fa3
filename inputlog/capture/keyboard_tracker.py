import threading
import uuid
from collections.abc import Callable

from inputlog.capture.base import BaseTracker
from inputlog.capture.clock import MonotonicClock
from inputlog.capture.sentence_segmenter import SentenceSegmenter
from inputlog.event_source.base import BaseEventSource
from inputlog.event_source.models import SpecialKey
from inputlog.logging.logger import Log
from inputlog.obfuscation.base import BaseObfuscator
from inputlog.storage.models import Category, InputLog, InputType
from inputlog.storage.repositories.input_log_repository import InputLogRepository

SentenceListener = Callable[[str], None]


class KeyboardTracker(BaseTracker):
    """Turns typed characters into obfuscated keyboard sentence logs.

    Special keys and shortcuts become their own records, after any buffered
    text. One lock serializes segmentation and saving, so records reach the
    repository in the order they were typed.
    """

    name = "keyboard"

    def __init__(
        self,
        source: BaseEventSource,
        repository: InputLogRepository,
        obfuscator: BaseObfuscator,
        clock: MonotonicClock | None = None,
    ) -> None:
        self._source = source
        self._repository = repository
        self._obfuscator = obfuscator
        self._clock = clock or MonotonicClock()
        self._segmenter = SentenceSegmenter()
        self._listeners: list[SentenceListener] = []
        self._lock = threading.Lock()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def add_listener(self, listener: SentenceListener) -> None:
        """Register a callback receiving each flushed sentence in plain text."""
        self._listeners.append(listener)

    def start(self) -> None:
        with self._lock:
            self._running = True
        try:
            self._source.start(self.on_key)
        except Exception:
            with self._lock:
                self._running = False
            raise
        Log.info("Keyboard tracking started")

    def stop(self) -> None:
        # Waits for an in-flight on_key, so the final flush is always saved last.
        with self._lock:
            if not self._running:
                return
            self._running = False
            sentence = self._segmenter.finish()
            if sentence is not None:
                self._flush(sentence)
        self._source.stop()
        Log.info("Keyboard tracking stopped")

    def on_key(self, event: str | SpecialKey) -> None:
        """Entry point for the event source: typed text or a special key."""
        if isinstance(event, SpecialKey):
            self.on_special(event.name)
        else:
            self.on_text(event)

    def on_text(self, text: str) -> None:
        """Feed characters from the event source; flushes complete sentences."""
        with self._lock:
            for char in text:
                if not self._running:
                    return
                sentence = self._segmenter.feed(char)
                if sentence is not None:
                    self._flush(sentence)

    def on_special(self, name: str) -> None:
        """Record a special key, flushing any buffered text before it."""
        with self._lock:
            if not self._running:
                return
            sentence = self._segmenter.finish()
            if sentence is not None:
                self._flush(sentence)
            self._save(name, InputType.SPECIAL)
            Log.debug(f"Special key: {name}")

    def _flush(self, sentence: str) -> None:
        Log.debug(f"Sentence flushed: {sentence}")
        for listener in self._listeners:
            try:
                listener(sentence)
            except Exception as exc:
                Log.error(f"Sentence listener failed: {exc}")
        self._save(sentence, InputType.TEXT)

    def _save(self, content: str, input_type: InputType) -> None:
        self._repository.save(
            InputLog(
                id=str(uuid.uuid4()),
                timestamp=self._clock.now(),
                content=self._obfuscator.encode(content) or "",
                category=Category.KEYBOARD,
                input_type=input_type,
            )
        )
