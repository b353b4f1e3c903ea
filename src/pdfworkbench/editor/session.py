"""
PDF Workbench - Interaction Session

State machine behind the interactive page grid. A session edits a pending
arrangement (reorder mode) or a pending selection (delete mode) of one
document and commits it through the transformation operations.

States:
    Idle      no thumbnails, nothing pending
    Loaded    thumbnails rendered, arrangement/selection editable
    Dragging  a page has been picked up in reorder mode
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from pdfworkbench.constants import THUMBNAIL_SCALE
from pdfworkbench.services.document import SourceDocument
from pdfworkbench.services.page_renderer import PageRenderer
from pdfworkbench.services.pdf_operations import (
    TransformationResult,
    delete_pages,
    reorder_pages,
)
from pdfworkbench.services.render_operations import generate_thumbnails
from pdfworkbench.utils.exceptions import InvalidInput, InvalidSessionTransition
from pdfworkbench.utils.progress_state import ProgressCallback

logger = logging.getLogger(__name__)


class SessionMode(Enum):
    REORDER = "reorder"
    DELETE = "delete"


class SessionState(Enum):
    IDLE = "Idle"
    LOADED = "Loaded"
    DRAGGING = "Dragging"


@dataclass
class InteractionSession:
    """Pending edits of one document in the page grid.

    Attributes:
        document: The document being edited (never modified)
        mode: Reorder or delete
        arrangement: Original page index shown at each grid position
        selection: Original page indices marked for deletion
        thumbnails: JPEG previews indexed by original page index
        dragging_position: Grid position picked up, while dragging
        state: Current state
    """

    document: SourceDocument
    mode: SessionMode = SessionMode.REORDER
    arrangement: list[int] = field(default_factory=list)
    selection: set[int] = field(default_factory=set)
    thumbnails: list[bytes] = field(default_factory=list, repr=False)
    dragging_position: int | None = None
    state: SessionState = SessionState.IDLE

    def __post_init__(self) -> None:
        try:
            self.mode = SessionMode(self.mode)
        except ValueError as e:
            raise InvalidInput(str(e), field="mode", value=self.mode) from e

    @property
    def document_id(self) -> str:
        return self.document.id

    @property
    def page_count(self) -> int:
        return self.document.page_count

    @property
    def is_active(self) -> bool:
        return self.state is not SessionState.IDLE

    @property
    def is_modified(self) -> bool:
        """Whether committing would change the document."""
        if self.mode is SessionMode.DELETE:
            return bool(self.selection)
        return self.arrangement != list(range(self.page_count))

    def _require(
        self,
        action: str,
        states: Iterable[SessionState],
        mode: SessionMode | None = None,
    ) -> None:
        if self.state not in states or (mode is not None and self.mode is not mode):
            raise InvalidSessionTransition(action, self.state.value, self.mode.value)

    def _check_index(self, value: int, field_name: str) -> None:
        if not 0 <= value < self.page_count:
            raise InvalidInput(
                f"must be between 0 and {self.page_count - 1}",
                field=field_name,
                value=value,
            )

    # -- lifecycle ----------------------------------------------------------

    def open(
        self,
        renderer: PageRenderer | None = None,
        on_progress: ProgressCallback | None = None,
        scale: float = THUMBNAIL_SCALE,
    ) -> None:
        """Render thumbnails and enter Loaded with an identity arrangement.

        Raises:
            InvalidSessionTransition: If the session is not Idle.
            RenderFailure: If thumbnailing fails; the session stays Idle.
        """
        self._require("open", (SessionState.IDLE,))
        thumbnails = generate_thumbnails(self.document, scale, renderer, on_progress)

        self.thumbnails = thumbnails
        self.arrangement = list(range(self.page_count))
        self.selection = set()
        self.dragging_position = None
        self.state = SessionState.LOADED
        logger.debug("Opened %s session for %s", self.mode.value, self.document.name)

    def commit(self) -> TransformationResult:
        """Apply the pending arrangement or selection.

        Returns:
            The result of ``reorder_pages`` or ``delete_pages``.

        Raises:
            InvalidSessionTransition: If the session is not Loaded.
            PdfWorkbenchError: Whatever the operation raises; the session
                then stays Loaded with its edits intact.
        """
        self._require("commit", (SessionState.LOADED,))

        if self.mode is SessionMode.REORDER:
            result = reorder_pages(self.document, self.arrangement)
        else:
            result = delete_pages(self.document, self.selection)

        self._release()
        logger.info("Committed %s session for %s", self.mode.value, self.document.name)
        return result

    def cancel(self) -> None:
        """Discard pending edits and return to Idle from any state."""
        if self.state is not SessionState.IDLE:
            logger.debug("Cancelled %s session for %s", self.mode.value, self.document.name)
        self._release()

    def _release(self) -> None:
        self.thumbnails = []
        self.dragging_position = None
        self.state = SessionState.IDLE

    # -- reorder mode -------------------------------------------------------

    def begin_drag(self, position: int) -> None:
        """Pick up the page shown at grid *position*."""
        self._require("begin_drag", (SessionState.LOADED,), SessionMode.REORDER)
        self._check_index(position, "position")
        self.dragging_position = position
        self.state = SessionState.DRAGGING

    def drop(self, target: int) -> None:
        """Move the dragged page to grid *target* (remove, then insert)."""
        self._require("drop", (SessionState.DRAGGING,), SessionMode.REORDER)
        self._check_index(target, "target")
        page = self.arrangement.pop(self.dragging_position)
        self.arrangement.insert(target, page)
        self.dragging_position = None
        self.state = SessionState.LOADED

    def cancel_drag(self) -> None:
        """Put the dragged page back without moving it."""
        self._require("cancel_drag", (SessionState.DRAGGING,), SessionMode.REORDER)
        self.dragging_position = None
        self.state = SessionState.LOADED

    # -- delete mode --------------------------------------------------------

    def toggle(self, index: int) -> None:
        """Flip whether original page *index* is marked for deletion."""
        self._require("toggle", (SessionState.LOADED,), SessionMode.DELETE)
        self._check_index(index, "index")
        if index in self.selection:
            self.selection.discard(index)
        else:
            self.selection.add(index)

    def remaining_pages(self) -> list[int]:
        """Original indices that a commit would keep, in output order."""
        if self.mode is SessionMode.DELETE:
            return [i for i in range(self.page_count) if i not in self.selection]
        return list(self.arrangement)


def open_session(
    document: SourceDocument,
    mode: SessionMode | str,
    renderer: PageRenderer | None = None,
    on_progress: ProgressCallback | None = None,
    scale: float = THUMBNAIL_SCALE,
) -> InteractionSession:
    """Create a session and bring it to Loaded.

    Raises:
        RenderFailure: If thumbnails cannot be rendered.
    """
    session = InteractionSession(document=document, mode=mode)
    session.open(renderer, on_progress, scale)
    return session
