"""
PDF Workbench - Workspace

Owns the ingested documents of one user session, the single live
interaction session per document and the per-document locks that keep
work on the same document single-flight. Work on different documents
runs independently, optionally on a bounded thread pool.
"""

import inspect
import logging
import threading
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Any, TypeVar

from pdfworkbench.constants import DEFAULT_WORKSPACE_WORKERS
from pdfworkbench.editor.session import InteractionSession, SessionMode, open_session
from pdfworkbench.services.document import SourceDocument, ingest, ingest_path
from pdfworkbench.services.page_renderer import PageRenderer
from pdfworkbench.services.pdf_operations import TransformationResult
from pdfworkbench.utils.exceptions import InvalidInput, OperationPrecondition
from pdfworkbench.utils.i18n import _
from pdfworkbench.utils.progress_state import ProgressCallback

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Workspace:
    """Ordered collection of documents plus their sessions and locks.

    Every operation started through ``run``, ``stream`` or ``submit`` and
    every session transition holds the document's lock. A second request
    for a document that is already busy is refused with
    ``OperationPrecondition``.
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_WORKSPACE_WORKERS,
        renderer: PageRenderer | None = None,
    ) -> None:
        """Initialize the workspace.

        Args:
            max_workers: Size of the thread pool used by ``submit``
            renderer: Rendering surface for session thumbnails (default when None)
        """
        self._documents: dict[str, SourceDocument] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._sessions: dict[str, InteractionSession] = {}
        self._registry_lock = threading.Lock()
        self._max_workers = max_workers
        self._pool: ThreadPoolExecutor | None = None
        self._renderer = renderer

    # -- documents ----------------------------------------------------------

    @property
    def documents(self) -> list[SourceDocument]:
        with self._registry_lock:
            return list(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def add(self, doc: SourceDocument) -> SourceDocument:
        """Append an ingested document."""
        with self._registry_lock:
            self._documents[doc.id] = doc
            self._locks[doc.id] = threading.Lock()
        logger.info("Added %s (%d pages) to workspace", doc.name, doc.page_count)
        return doc

    def add_bytes(self, data: bytes, name: str) -> SourceDocument:
        """Ingest bytes and append the document.

        Raises:
            CorruptDocument: If the content cannot be parsed.
        """
        return self.add(ingest(data, name))

    def add_path(self, path: str | Path) -> SourceDocument:
        """Ingest a file from disk and append the document."""
        return self.add(ingest_path(path))

    def get(self, doc_id: str) -> SourceDocument:
        """Look up a document.

        Raises:
            InvalidInput: If no document has this id.
        """
        try:
            return self._documents[doc_id]
        except KeyError:
            raise InvalidInput(_("unknown document"), field="doc_id", value=doc_id) from None

    def remove(self, doc_id: str) -> SourceDocument:
        """Evict a document and discard its session.

        Raises:
            OperationPrecondition: If work on the document is in progress.
        """
        with self._acquire(doc_id, "remove document"):
            with self._registry_lock:
                doc = self._documents.pop(doc_id)
                self._sessions.pop(doc_id, None)
        with self._registry_lock:
            self._locks.pop(doc_id, None)
        logger.info("Removed %s from workspace", doc.name)
        return doc

    def move(self, doc_id: str, position: int) -> None:
        """Move a document to *position* in the workspace order."""
        self.get(doc_id)
        with self._registry_lock:
            order = list(self._documents)
            if not 0 <= position < len(order):
                raise InvalidInput(
                    f"must be between 0 and {len(order) - 1}", field="position", value=position
                )
            order.remove(doc_id)
            order.insert(position, doc_id)
            self._documents = {key: self._documents[key] for key in order}

    def clear(self) -> None:
        """Evict every document that is not busy.

        Raises:
            OperationPrecondition: If any document is busy; nothing is removed.
        """
        with ExitStack() as stack:
            for doc_id in list(self._documents):
                stack.enter_context(self._acquire(doc_id, "clear workspace"))
            with self._registry_lock:
                self._documents.clear()
                self._sessions.clear()
        with self._registry_lock:
            self._locks.clear()
        logger.info("Workspace cleared")

    # -- locking ------------------------------------------------------------

    @contextmanager
    def _acquire(self, doc_id: str, operation: str) -> Iterator[SourceDocument]:
        doc = self.get(doc_id)
        lock = self._locks[doc_id]
        if not lock.acquire(blocking=False):
            logger.warning("Refused %s on %s: document is busy", operation, doc.name)
            raise OperationPrecondition(operation, _("document is busy"))
        try:
            yield doc
        finally:
            lock.release()

    def is_busy(self, doc_id: str) -> bool:
        lock = self._locks.get(doc_id)
        return lock is not None and lock.locked()

    # -- operations ---------------------------------------------------------

    def run(self, doc_id: str, operation: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``operation(doc, *args, **kwargs)`` while holding the document's lock.

        Raises:
            InvalidInput: If the operation returns a lazy stream; such
                operations must go through ``stream``.
        """
        name = getattr(operation, "__name__", "operation")
        with self._acquire(doc_id, name) as doc:
            result = operation(doc, *args, **kwargs)
            if inspect.isgenerator(result):
                result.close()
                raise InvalidInput(
                    _("lazy page streams must be iterated through Workspace.stream"),
                    field="operation",
                    value=name,
                )
            return result

    def run_many(
        self,
        doc_ids: Sequence[str],
        operation: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Run ``operation([docs...], ...)`` holding the locks of all documents.

        Each distinct document is locked once; the list handed to the
        operation keeps the order and repeats of *doc_ids*.
        """
        name = getattr(operation, "__name__", "operation")
        with ExitStack() as stack:
            locked = {
                doc_id: stack.enter_context(self._acquire(doc_id, name))
                for doc_id in dict.fromkeys(doc_ids)
            }
            return operation([locked[doc_id] for doc_id in doc_ids], *args, **kwargs)

    def stream(
        self, doc_id: str, operation: Callable[..., Iterator[T]], *args: Any, **kwargs: Any
    ) -> Iterator[T]:
        """Iterate ``operation(doc, ...)`` while holding the document's lock.

        For the lazy page streams (``iter_thumbnails``, ``iter_page_images``,
        ``iter_page_texts``). The busy check happens on the first ``next()``;
        the lock is released when the stream is exhausted, fails or is closed.
        """
        name = getattr(operation, "__name__", "operation")
        with self._acquire(doc_id, name) as doc:
            items = operation(doc, *args, **kwargs)
            try:
                yield from items
            finally:
                items.close()

    def submit(
        self, doc_id: str, operation: Callable[..., T], *args: Any, **kwargs: Any
    ) -> "Future[T]":
        """Run an operation on the workspace thread pool.

        The busy check happens when the worker starts, so a refused
        request surfaces as the future's exception.
        """
        self.get(doc_id)
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=self._max_workers)
        return self._pool.submit(self.run, doc_id, operation, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=wait)
            self._pool = None

    # -- sessions -----------------------------------------------------------

    def open_session(
        self,
        doc_id: str,
        mode: SessionMode | str,
        on_progress: ProgressCallback | None = None,
    ) -> InteractionSession:
        """Open the interactive grid for a document.

        Raises:
            OperationPrecondition: If the document already has a live session.
            RenderFailure: If thumbnails cannot be rendered; no session is kept.
        """
        with self._acquire(doc_id, "open session") as doc:
            if doc_id in self._sessions:
                raise OperationPrecondition("open session", _("a session is already open"))
            session = open_session(doc, mode, self._renderer, on_progress)
            with self._registry_lock:
                self._sessions[doc_id] = session
        return session

    def get_session(self, doc_id: str) -> InteractionSession | None:
        return self._sessions.get(doc_id)

    def _live_session(self, doc_id: str, action: str) -> InteractionSession:
        session = self._sessions.get(doc_id)
        if session is None:
            raise OperationPrecondition(action, _("no session is open"))
        return session

    def _session_call(self, doc_id: str, action: str, *args: Any) -> Any:
        with self._acquire(doc_id, action):
            return getattr(self._live_session(doc_id, action), action)(*args)

    def begin_drag(self, doc_id: str, position: int) -> None:
        self._session_call(doc_id, "begin_drag", position)

    def drop(self, doc_id: str, target: int) -> None:
        self._session_call(doc_id, "drop", target)

    def cancel_drag(self, doc_id: str) -> None:
        self._session_call(doc_id, "cancel_drag")

    def toggle(self, doc_id: str, index: int) -> None:
        self._session_call(doc_id, "toggle", index)

    def commit(self, doc_id: str) -> TransformationResult:
        """Commit the document's session and close it.

        On failure the session stays open and Loaded.
        """
        with self._acquire(doc_id, "commit"):
            session = self._live_session(doc_id, "commit")
            result = session.commit()
            with self._registry_lock:
                self._sessions.pop(doc_id, None)
        return result

    def cancel(self, doc_id: str) -> None:
        """Cancel and close the document's session, if any."""
        with self._acquire(doc_id, "cancel"):
            with self._registry_lock:
                session = self._sessions.pop(doc_id, None)
            if session is not None:
                session.cancel()
