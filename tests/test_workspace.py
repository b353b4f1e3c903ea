"""Tests for the document workspace and its per-document locking."""

import threading

import pytest
from conftest import build_image, build_pdf, labels_of

from pdfworkbench.editor import SessionState, Workspace
from pdfworkbench.services.document import DocumentKind
from pdfworkbench.services.pdf_operations import merge_documents, rotate_pages
from pdfworkbench.services.render_operations import iter_thumbnails
from pdfworkbench.utils.exceptions import InvalidInput, OperationPrecondition


@pytest.fixture
def workspace(fake_renderer):
    ws = Workspace(max_workers=2, renderer=fake_renderer)
    yield ws
    ws.shutdown()


def _blocking_operation(started: threading.Event, release: threading.Event):
    def operation(doc):
        started.set()
        release.wait(timeout=5)
        return doc.name

    return operation


class TestDocuments:
    def test_add_keeps_order(self, workspace):
        a = workspace.add_bytes(build_pdf(1), "a.pdf")
        b = workspace.add_bytes(build_image(), "b.png")
        assert [d.name for d in workspace.documents] == ["a.pdf", "b.png"]
        assert b.kind is DocumentKind.SINGLE_IMAGE
        assert a.id in workspace
        assert len(workspace) == 2

    def test_add_path(self, workspace, tmp_path):
        path = tmp_path / "disk.pdf"
        path.write_bytes(build_pdf(2))
        doc = workspace.add_path(path)
        assert doc.name == "disk.pdf"
        assert doc.page_count == 2

    def test_unknown_id(self, workspace):
        with pytest.raises(InvalidInput):
            workspace.get("nope")

    def test_move(self, workspace):
        docs = [workspace.add_bytes(build_pdf(1), f"{n}.pdf") for n in "abc"]
        workspace.move(docs[2].id, 0)
        assert [d.name for d in workspace.documents] == ["c.pdf", "a.pdf", "b.pdf"]
        with pytest.raises(InvalidInput):
            workspace.move(docs[0].id, 3)

    def test_remove_and_clear(self, workspace):
        a = workspace.add_bytes(build_pdf(1), "a.pdf")
        workspace.add_bytes(build_pdf(1), "b.pdf")
        removed = workspace.remove(a.id)
        assert removed is a
        assert a.id not in workspace
        workspace.clear()
        assert len(workspace) == 0


class TestOperations:
    def test_run_returns_result(self, workspace):
        doc = workspace.add_bytes(build_pdf(2), "a.pdf")
        result = workspace.run(doc.id, rotate_pages, 90)
        assert result.suggested_name == "rotated_a.pdf"
        assert not workspace.is_busy(doc.id)

    def test_run_many(self, workspace):
        a = workspace.add_bytes(build_pdf(1), "a.pdf")
        b = workspace.add_bytes(build_pdf(2), "b.pdf")
        result = workspace.run_many([b.id, a.id], merge_documents)
        assert labels_of(result.data) == [1, 2, 1]

    def test_run_many_repeated_document(self, workspace):
        a = workspace.add_bytes(build_pdf(2), "a.pdf")
        result = workspace.run_many([a.id, a.id], merge_documents)
        assert labels_of(result.data) == [1, 2, 1, 2]
        assert not workspace.is_busy(a.id)

    def test_stream_holds_lock_until_closed(self, workspace, fake_renderer):
        doc = workspace.add_bytes(build_pdf(3), "a.pdf")
        thumbs = workspace.stream(doc.id, iter_thumbnails, 0.4, fake_renderer)
        next(thumbs)
        assert workspace.is_busy(doc.id)
        with pytest.raises(OperationPrecondition, match="busy"):
            workspace.run(doc.id, rotate_pages, 90)
        thumbs.close()
        assert not workspace.is_busy(doc.id)
        assert fake_renderer.closed

    def test_stream_released_when_exhausted(self, workspace, fake_renderer):
        doc = workspace.add_bytes(build_pdf(2), "a.pdf")
        assert len(list(workspace.stream(doc.id, iter_thumbnails, 0.4, fake_renderer))) == 2
        assert not workspace.is_busy(doc.id)

    def test_run_refuses_lazy_stream(self, workspace, fake_renderer):
        doc = workspace.add_bytes(build_pdf(2), "a.pdf")
        with pytest.raises(InvalidInput):
            workspace.run(doc.id, iter_thumbnails, 0.4, fake_renderer)
        assert not workspace.is_busy(doc.id)

    def test_busy_document_refused(self, workspace):
        doc = workspace.add_bytes(build_pdf(1), "a.pdf")
        started, release = threading.Event(), threading.Event()
        future = workspace.submit(doc.id, _blocking_operation(started, release))
        assert started.wait(timeout=5)
        try:
            assert workspace.is_busy(doc.id)
            with pytest.raises(OperationPrecondition, match="busy"):
                workspace.run(doc.id, rotate_pages, 90)
            with pytest.raises(OperationPrecondition):
                workspace.remove(doc.id)
        finally:
            release.set()
        assert future.result(timeout=5) == "a.pdf"
        assert not workspace.is_busy(doc.id)

    def test_other_documents_stay_available(self, workspace):
        busy = workspace.add_bytes(build_pdf(1), "busy.pdf")
        free = workspace.add_bytes(build_pdf(1), "free.pdf")
        started, release = threading.Event(), threading.Event()
        future = workspace.submit(busy.id, _blocking_operation(started, release))
        assert started.wait(timeout=5)
        try:
            assert workspace.run(free.id, rotate_pages, 180).pages_affected == 1
        finally:
            release.set()
        future.result(timeout=5)


class TestSessions:
    def test_one_session_per_document(self, workspace):
        doc = workspace.add_bytes(build_pdf(3), "a.pdf")
        session = workspace.open_session(doc.id, "reorder")
        assert session.state is SessionState.LOADED
        assert workspace.get_session(doc.id) is session
        with pytest.raises(OperationPrecondition):
            workspace.open_session(doc.id, "delete")

    def test_commit_closes_session(self, workspace):
        doc = workspace.add_bytes(build_pdf(3), "a.pdf")
        workspace.open_session(doc.id, "reorder")
        workspace.begin_drag(doc.id, 2)
        workspace.drop(doc.id, 0)
        result = workspace.commit(doc.id)
        assert labels_of(result.data) == [3, 1, 2]
        assert workspace.get_session(doc.id) is None

    def test_commit_closes_session_before_unlocking(self, workspace):
        doc = workspace.add_bytes(build_pdf(2), "a.pdf")
        workspace.open_session(doc.id, "reorder")
        real_lock = workspace._locks[doc.id]
        open_at_release = []

        class RecordingLock:
            def acquire(self, blocking=True):
                return real_lock.acquire(blocking)

            def locked(self):
                return real_lock.locked()

            def release(self):
                open_at_release.append(doc.id in workspace._sessions)
                real_lock.release()

        workspace._locks[doc.id] = RecordingLock()
        workspace.commit(doc.id)
        assert open_at_release == [False]

    def test_failed_commit_keeps_session(self, workspace):
        doc = workspace.add_bytes(build_pdf(2), "a.pdf")
        workspace.open_session(doc.id, "delete")
        workspace.toggle(doc.id, 0)
        workspace.toggle(doc.id, 1)
        with pytest.raises(OperationPrecondition):
            workspace.commit(doc.id)
        assert workspace.get_session(doc.id).state is SessionState.LOADED

    def test_cancel_allows_new_session(self, workspace):
        doc = workspace.add_bytes(build_pdf(2), "a.pdf")
        first = workspace.open_session(doc.id, "reorder")
        workspace.cancel(doc.id)
        assert first.state is SessionState.IDLE
        assert workspace.get_session(doc.id) is None
        workspace.open_session(doc.id, "delete")

    def test_gesture_without_session(self, workspace):
        doc = workspace.add_bytes(build_pdf(2), "a.pdf")
        with pytest.raises(OperationPrecondition):
            workspace.toggle(doc.id, 0)
