"""
PDF Workbench - Editor Module

Interactive page editing: the reorder/delete session state machine and
the workspace that owns documents, sessions and per-document locks.

Main Components:
- InteractionSession: Pending arrangement or selection of one document
- Workspace: Document collection with single-flight locking
"""

from pdfworkbench.editor.session import (
    InteractionSession,
    SessionMode,
    SessionState,
    open_session,
)
from pdfworkbench.editor.workspace import Workspace

__all__ = [
    "InteractionSession",
    "SessionMode",
    "SessionState",
    "open_session",
    "Workspace",
]
