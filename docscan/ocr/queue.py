"""Single-flight OCR queue.

At most one document is recognized at a time. Other documents wait in a
deduplicated FIFO list. Pages are recognized strictly in order and every
page result, progress count and status change is written through the store
as soon as it happens, re-reading the document each time.

Cancellation is cooperative and observed at page boundaries: the recognition
call in flight for the cancelled document finishes in the background and its
result is discarded.

All public methods must be called from the event loop thread.
"""

import asyncio
import itertools
from collections import deque
from dataclasses import dataclass

from docscan.documents.exceptions import DocumentError, DocumentNotFoundError
from docscan.documents.models import Document, OcrProgress, OcrStatus, Page
from docscan.documents.naming import to_fs_path
from docscan.logging.logger import Log
from docscan.ocr.events import OcrCompleteEvent, OcrEventBus, OcrProgressEvent
from docscan.ocr.exceptions import RecognitionError
from docscan.ocr.models import OcrPageResult
from docscan.ocr.recognizer import TieredRecognizer
from docscan.store.base import BaseDocumentStore

EXCERPT_LENGTH = 200
ELLIPSIS = "…"


class OcrQueueError(Exception):
    """Base exception for queue misuse."""


class InvalidQueueTransitionError(OcrQueueError):
    """Raised when the queue is asked to move into a state it cannot reach."""


class QueueClosedError(OcrQueueError):
    """Raised when work is enqueued after the queue was closed."""


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Running:
    document_id: str
    run_id: int


@dataclass(frozen=True)
class Draining:
    """Close requested while a document was running; it finishes, nothing follows."""

    document_id: str
    run_id: int


@dataclass(frozen=True)
class Closed:
    pass


QueueState = Idle | Running | Draining | Closed

_TRANSITIONS: dict[type, frozenset[type]] = {
    Idle: frozenset({Running, Closed}),
    Running: frozenset({Idle, Draining}),
    Draining: frozenset({Closed}),
    Closed: frozenset(),
}


@dataclass(frozen=True)
class QueueStatus:
    processing: bool
    current: str | None
    queued: tuple[str, ...]


def build_excerpt(pages: list[Page], limit: int = EXCERPT_LENGTH) -> str:
    """First ``limit`` characters of the concatenated page texts, cut at a word boundary."""
    text = " ".join(p.ocr_text or "" for p in pages).strip()
    if len(text) <= limit:
        return text
    cutoff = text[:limit]
    last_space = cutoff.rfind(" ")
    if last_space > limit * 3 // 4:
        return cutoff[:last_space] + ELLIPSIS
    return cutoff + ELLIPSIS


class OcrQueue:
    """Drives the recognizer across queued documents one document at a time."""

    def __init__(
        self,
        store: BaseDocumentStore,
        recognizer: TieredRecognizer,
        events: OcrEventBus | None = None,
    ) -> None:
        self._store = store
        self._recognizer = recognizer
        self._events = events if events is not None else OcrEventBus()
        self._state: QueueState = Idle()
        self._waiting: deque[str] = deque()
        self._run_ids = itertools.count(1)
        self._tasks: set[asyncio.Task[None]] = set()
        self._settled = asyncio.Event()
        self._settled.set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def events(self) -> OcrEventBus:
        return self._events

    @property
    def state(self) -> QueueState:
        return self._state

    @property
    def current_document_id(self) -> str | None:
        if isinstance(self._state, (Running, Draining)):
            return self._state.document_id
        return None

    @property
    def is_running(self) -> bool:
        return self.current_document_id is not None

    def status(self) -> QueueStatus:
        return QueueStatus(
            processing=self.is_running,
            current=self.current_document_id,
            queued=tuple(self._waiting),
        )

    def enqueue(self, document_id: str) -> None:
        """Queue a document for OCR; no-op if it is done, running or already queued.

        Raises:
            QueueClosedError: if the queue is closing or closed.
        """
        if isinstance(self._state, (Draining, Closed)):
            raise QueueClosedError("OCR queue is closed")

        document = self._store.find(document_id)
        if document is None:
            Log.warning("Cannot enqueue missing document", document_id=document_id)
            return
        if document.ocr_status in (OcrStatus.DONE, OcrStatus.RUNNING):
            Log.info(
                f"Skipping enqueue, OCR already {document.ocr_status.value}",
                document_id=document_id,
            )
            return

        if document_id != self.current_document_id and document_id not in self._waiting:
            self._waiting.append(document_id)
            Log.info("Document added to OCR queue", document_id=document_id)
        self._start_next()

    def cancel(self, document_id: str) -> None:
        """Drop a document from the wait list, or stop it if it is being processed."""
        if document_id in self._waiting:
            self._waiting.remove(document_id)
            Log.info("Document removed from OCR queue", document_id=document_id)

        if self.current_document_id != document_id:
            return

        Log.info("Cancelling active OCR run", document_id=document_id)
        try:
            self._store.update(document_id, _mark_idle)
        except DocumentNotFoundError:
            Log.warning("Cancelled document no longer exists", document_id=document_id)
        except DocumentError as exc:
            Log.warning(f"Could not record OCR cancel: {exc}", document_id=document_id)
        self._finish_active()

    def cancel_current(self) -> None:
        current = self.current_document_id
        if current is not None:
            self.cancel(current)

    async def join(self) -> None:
        """Wait until nothing is running and the wait list is empty (or the queue closed)."""
        await self._settled.wait()

    async def aclose(self) -> None:
        """Stop accepting work, let the active document finish and close the queue."""
        state = self._state
        if isinstance(state, Closed):
            return
        dropped = len(self._waiting)
        self._waiting.clear()
        if dropped:
            Log.info(f"Dropped {dropped} queued documents on close")
        if isinstance(state, Idle):
            self._transition(Closed())
            self._settled.set()
            return
        if isinstance(state, Running):
            self._transition(Draining(state.document_id, state.run_id))
        await self._settled.wait()

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _transition(self, new_state: QueueState) -> None:
        allowed = _TRANSITIONS[type(self._state)]
        if type(new_state) not in allowed:
            raise InvalidQueueTransitionError(
                f"Cannot move OCR queue from {type(self._state).__name__} "
                f"to {type(new_state).__name__}"
            )
        Log.debug(f"OCR queue {type(self._state).__name__} -> {type(new_state).__name__}")
        self._state = new_state

    def _is_active(self, run_id: int) -> bool:
        return isinstance(self._state, (Running, Draining)) and self._state.run_id == run_id

    def _start_next(self) -> None:
        if not isinstance(self._state, Idle):
            return
        if not self._waiting:
            self._settled.set()
            return
        loop = asyncio.get_running_loop()
        document_id = self._waiting.popleft()
        run_id = next(self._run_ids)
        self._transition(Running(document_id, run_id))
        self._settled.clear()
        task = loop.create_task(self._run(document_id, run_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _finish_active(self) -> None:
        if isinstance(self._state, Running):
            self._transition(Idle())
            self._start_next()
        elif isinstance(self._state, Draining):
            self._transition(Closed())
            self._settled.set()

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    async def _run(self, document_id: str, run_id: int) -> None:
        Log.info("Starting OCR run", document_id=document_id)
        try:
            await self._process(document_id, run_id)
        except Exception as exc:
            if self._is_active(run_id):
                self._fail(document_id, exc)
        finally:
            if self._is_active(run_id):
                self._finish_active()

    async def _process(self, document_id: str, run_id: int) -> None:
        document = self._store.get(document_id)
        if not document.pages:
            raise DocumentError(f"Document has no pages: {document_id}")

        page_ids = [p.id for p in document.pages]
        total = len(page_ids)
        processed = 0

        def start(doc: Document) -> None:
            doc.ocr_status = OcrStatus.RUNNING
            doc.ocr_progress = OcrProgress(0, total)

        self._store.update(document_id, start)
        self._events.emit_progress(OcrProgressEvent(document_id, 0, total))

        for index, page_id in enumerate(page_ids, start=1):
            if not self._is_active(run_id):
                Log.info("OCR run cancelled", document_id=document_id, processed=processed)
                return

            result = await self._recognize_page(document_id, page_id, index, total)

            if not self._is_active(run_id):
                Log.info(
                    "OCR run cancelled, discarding in-flight page result",
                    document_id=document_id,
                    page=index,
                )
                return

            processed += 1
            progress = OcrProgress(processed, total)
            self._store.update(
                document_id,
                lambda doc: _apply_page_result(doc, page_id, result, progress),
            )
            self._events.emit_progress(OcrProgressEvent(document_id, processed, total))

        def finish(doc: Document) -> None:
            doc.ocr_status = OcrStatus.DONE
            doc.ocr_progress = OcrProgress(processed, total)
            doc.ocr_excerpt = build_excerpt(doc.pages)

        self._store.update(document_id, finish)
        Log.info("OCR run completed", document_id=document_id, pages=processed)
        self._events.emit_complete(OcrCompleteEvent(document_id, success=True))

    async def _recognize_page(
        self, document_id: str, page_id: str, index: int, total: int
    ) -> OcrPageResult | None:
        page = self._store.get(document_id).find_page(page_id)
        if page is None:
            Log.warning(
                "Page removed during OCR, skipping",
                document_id=document_id,
                page_id=page_id,
            )
            return None
        Log.info(f"Recognizing page {index}/{total}", document_id=document_id)
        try:
            result = await self._recognizer.recognize(to_fs_path(page.image_path))
        except RecognitionError as exc:
            Log.warning(
                f"Page {index}/{total} recognition failed: {exc}",
                document_id=document_id,
            )
            return OcrPageResult(full_text="", words=[])
        Log.info(
            f"Page {index}/{total} recognized",
            document_id=document_id,
            chars=len(result.full_text),
            words=len(result.words),
        )
        return result

    def _fail(self, document_id: str, exc: Exception) -> None:
        Log.exception(f"OCR run failed: {exc}", document_id=document_id)
        try:
            self._store.update(document_id, _mark_error)
        except DocumentError as store_exc:
            Log.warning(f"Could not record OCR failure: {store_exc}", document_id=document_id)
        self._events.emit_complete(
            OcrCompleteEvent(document_id, success=False, error=str(exc))
        )


def _mark_idle(document: Document) -> None:
    document.ocr_status = OcrStatus.IDLE


def _mark_error(document: Document) -> None:
    document.ocr_status = OcrStatus.ERROR


def _apply_page_result(
    document: Document,
    page_id: str,
    result: OcrPageResult | None,
    progress: OcrProgress,
) -> None:
    document.ocr_progress = progress
    if result is None:
        return
    page = document.find_page(page_id)
    if page is None:
        return
    page.ocr_text = result.full_text
    page.ocr_boxes = list(result.words)
