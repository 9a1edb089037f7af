"""
Session aggregate.

All watermarking state for the file being viewed lives in one frozen
``Session``; every change goes through a function below that returns a new
session, so invariants such as "view state resets when the file changes"
are enforced in one place.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional, Tuple

from docmark.core.errors import StyleLockedError
from docmark.models import DocumentRef, GeneratedStyle, UploadedBuffer, WatermarkSpec
from docmark.services.documents import NormalizedDocument
from docmark.services.style_generator import apply_style

HISTORY_LIMIT = 50
ZOOM_MIN = 0.25
ZOOM_MAX = 4.0


@dataclass(frozen=True)
class ViewState:
    """Viewer-only zoom and rotation; unrelated to the watermark's rotation."""

    zoom: float = 1.0
    rotation: int = 0


@dataclass(frozen=True)
class Session:
    buffer: UploadedBuffer
    document_ref: DocumentRef
    user_id: str
    spec: WatermarkSpec = field(default_factory=WatermarkSpec)
    document: Optional[NormalizedDocument] = None
    locked: bool = False
    generated_style: Optional[GeneratedStyle] = None
    history: Tuple[WatermarkSpec, ...] = ()
    view: ViewState = field(default_factory=ViewState)
    epoch: int = 0

    @property
    def is_loaded(self) -> bool:
        return self.document is not None


def new_session(
    buffer: UploadedBuffer,
    document_ref: DocumentRef,
    user_id: str,
    spec: Optional[WatermarkSpec] = None,
    epoch: int = 0,
) -> Session:
    return Session(
        buffer=buffer,
        document_ref=document_ref,
        user_id=user_id,
        spec=spec or WatermarkSpec(),
        epoch=epoch,
    )


def switch_file(session: Session, buffer: UploadedBuffer, epoch: int) -> Session:
    """View another upload: the watermark carries over, the document and view do not."""
    return replace(session, buffer=buffer, document=None, view=ViewState(), epoch=epoch)


def with_document(session: Session, document: NormalizedDocument) -> Session:
    return replace(session, document=document)


def _push(session: Session, spec: WatermarkSpec, **changes: Any) -> Session:
    if spec == session.spec:
        return replace(session, **changes) if changes else session
    history = (session.history + (session.spec,))[-HISTORY_LIMIT:]
    return replace(session, spec=spec, history=history, **changes)


def edit_spec(session: Session, **changes: Any) -> Session:
    """Apply direct user edits; allowed even while the style is locked."""
    return _push(session, session.spec.update(**changes))


def apply_generated(session: Session, style: GeneratedStyle) -> Session:
    if session.locked:
        raise StyleLockedError("The watermark style is locked; unlock it to generate a new one.")
    return _push(session, apply_style(session.spec, style), generated_style=style)


def toggle_lock(session: Session) -> Session:
    return replace(session, locked=not session.locked)


def undo(session: Session) -> Session:
    if not session.history:
        return session
    return replace(session, spec=session.history[-1], history=session.history[:-1])


def can_export(session: Session) -> bool:
    return not (session.locked and session.generated_style is None)


def set_zoom(session: Session, zoom: float) -> Session:
    zoom = max(ZOOM_MIN, min(ZOOM_MAX, zoom))
    return replace(session, view=replace(session.view, zoom=zoom))


def rotate_view(session: Session, degrees: int = 90) -> Session:
    rotation = (session.view.rotation + degrees) % 360
    return replace(session, view=replace(session.view, rotation=rotation))
