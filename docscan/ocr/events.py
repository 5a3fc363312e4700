"""Progress and completion notifications for OCR runs.

Listeners are called synchronously, in subscription order, at the moment of
emission. For any run every progress event is delivered before its
completion event.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from docscan.logging.logger import Log

E = TypeVar("E")


@dataclass(frozen=True)
class OcrProgressEvent:
    document_id: str
    processed: int
    total: int


@dataclass(frozen=True)
class OcrCompleteEvent:
    document_id: str
    success: bool
    error: str | None = None


class Subscription:
    """Handle returned by subscribe; unsubscribing twice is harmless."""

    def __init__(self, remove: Callable[[], None]) -> None:
        self._remove: Callable[[], None] | None = remove

    @property
    def active(self) -> bool:
        return self._remove is not None

    def unsubscribe(self) -> None:
        if self._remove is not None:
            self._remove()
            self._remove = None

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class _Channel(Generic[E]):
    def __init__(self, name: str) -> None:
        self._name = name
        self._listeners: list[Callable[[E], None]] = []

    def subscribe(self, listener: Callable[[E], None]) -> Subscription:
        self._listeners.append(listener)
        return Subscription(lambda: self._discard(listener))

    def _discard(self, listener: Callable[[E], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event: E) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as exc:
                Log.warning(f"OCR {self._name} listener failed: {exc}")

    def __len__(self) -> int:
        return len(self._listeners)

    def clear(self) -> None:
        self._listeners.clear()


class OcrEventBus:
    """Broadcasts OCR progress and completion to subscribed listeners."""

    def __init__(self) -> None:
        self._progress: _Channel[OcrProgressEvent] = _Channel("progress")
        self._complete: _Channel[OcrCompleteEvent] = _Channel("complete")

    def subscribe_progress(self, listener: Callable[[OcrProgressEvent], None]) -> Subscription:
        return self._progress.subscribe(listener)

    def subscribe_complete(self, listener: Callable[[OcrCompleteEvent], None]) -> Subscription:
        return self._complete.subscribe(listener)

    def emit_progress(self, event: OcrProgressEvent) -> None:
        self._progress.emit(event)

    def emit_complete(self, event: OcrCompleteEvent) -> None:
        self._complete.emit(event)

    @property
    def listener_count(self) -> int:
        return len(self._progress) + len(self._complete)

    def clear(self) -> None:
        self._progress.clear()
        self._complete.clear()
