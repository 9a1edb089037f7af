from __future__ import annotations

from typing import Awaitable, Callable, List, Optional, Sequence, Union

from docmark.core.config import Settings, get_settings
from docmark.core.errors import DocmarkError, EmptyInputError, ExportBlockedError
from docmark.core.logging import configure_logging
from docmark.models import (
    NOT_APPLICABLE,
    ContainerSize,
    DocumentRef,
    DownloadPlan,
    GeneratedStyle,
    UploadedBuffer,
    WatermarkSpec,
)
from docmark.services import packager, session as sessions
from docmark.services.compositor import ExportCompositor
from docmark.services.documents import PagePreview
from docmark.services.normalizer import FormatNormalizer
from docmark.services.style_generator import generate, regenerate
from docmark.storage.downloads import DownloadSink
from docmark.storage.settings_store import JsonFileStore, KeyValueStore
from docmark.utils.fonts import FontResolver

logger = configure_logging("engine")


class WatermarkEngine:
    """Binds uploads, the current session and the export pipeline together.

    Loads are tagged with an epoch; a load that finishes after another file
    was selected is dropped instead of replacing the newer session.
    """

    def __init__(
        self,
        document: DocumentRef,
        user_id: str,
        *,
        settings: Optional[Settings] = None,
        store: Optional[KeyValueStore] = None,
        normalizer: Optional[FormatNormalizer] = None,
        compositor: Optional[ExportCompositor] = None,
        spec: Optional[WatermarkSpec] = None,
        on_error: Optional[Callable[[DocmarkError], None]] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.document_ref = document
        self.user_id = user_id
        self.store = store or JsonFileStore(self.settings.store_dir)
        self.normalizer = normalizer or FormatNormalizer(self.settings, on_error=self._report)
        self.compositor = compositor or ExportCompositor(FontResolver(self.settings.font_dir))
        self.on_error = on_error

        self.files: List[UploadedBuffer] = []
        self.session: Optional[sessions.Session] = None
        self.errors: List[DocmarkError] = []
        self._initial_spec = spec
        self._epoch = 0

    def _report(self, error: DocmarkError) -> None:
        self.errors.append(error)
        if self.on_error:
            self.on_error(error)

    def _require_session(self) -> sessions.Session:
        if self.session is None:
            raise EmptyInputError("No file selected.")
        return self.session

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------
    async def open_files(self, buffers: Sequence[UploadedBuffer]) -> Optional[sessions.Session]:
        if not buffers:
            raise EmptyInputError("No file selected.")
        self.files = list(buffers)
        return await self.select_file(0)

    async def select_file(self, index: int) -> Optional[sessions.Session]:
        """Switch the viewed file and load it; returns ``None`` if superseded meanwhile."""
        if not 0 <= index < len(self.files):
            raise EmptyInputError(f"No file at position {index + 1}.")

        self._epoch += 1
        epoch = self._epoch
        buffer = self.files[index]

        previous = self.session
        if previous is None:
            self.session = sessions.new_session(
                buffer, self.document_ref, self.user_id, spec=self._initial_spec, epoch=epoch
            )
        else:
            if previous.document is not None:
                previous.document.release()
            self.session = sessions.switch_file(previous, buffer, epoch)

        document = await self.normalizer.normalize(buffer)

        if epoch != self._epoch or self.session is None:
            logger.info("Discarding stale load of %s", buffer.name)
            document.release()
            return None

        self.session = sessions.with_document(self.session, document)
        logger.info("Loaded %s: %s, %s page(s)", buffer.name, document.kind.value, document.page_count)
        return self.session

    def close(self) -> None:
        self._epoch += 1
        if self.session is not None and self.session.document is not None:
            self.session.document.release()
        self.session = None
        self.files = []

    # ------------------------------------------------------------------
    # Styling
    # ------------------------------------------------------------------
    def edit(self, **changes) -> WatermarkSpec:
        self.session = sessions.edit_spec(self._require_session(), **changes)
        return self.session.spec

    def generate_style(self) -> GeneratedStyle:
        current = self._require_session()
        spec = current.spec
        style = generate(spec.text, spec.anchor, self.document_ref.id, self.user_id)
        self.session = sessions.apply_generated(current, style)
        return style

    def regenerate_variant(self, nonce: Union[str, int, None] = None) -> GeneratedStyle:
        current = self._require_session()
        spec = current.spec
        if nonce is None:
            style = regenerate(spec.text, spec.anchor, self.document_ref.id, self.user_id)
        else:
            style = generate(spec.text, spec.anchor, self.document_ref.id, self.user_id, nonce=nonce)
        self.session = sessions.apply_generated(current, style)
        return style

    def toggle_lock(self) -> bool:
        self.session = sessions.toggle_lock(self._require_session())
        return self.session.locked

    def undo(self) -> WatermarkSpec:
        self.session = sessions.undo(self._require_session())
        return self.session.spec

    def set_zoom(self, zoom: float) -> sessions.ViewState:
        self.session = sessions.set_zoom(self._require_session(), zoom)
        return self.session.view

    def rotate_view(self, degrees: int = 90) -> sessions.ViewState:
        self.session = sessions.rotate_view(self._require_session(), degrees)
        return self.session.view

    # ------------------------------------------------------------------
    # Preview & export
    # ------------------------------------------------------------------
    def preview(self, page_index: int = 0, container: Optional[ContainerSize] = None) -> Optional[PagePreview]:
        current = self._require_session()
        if current.document is None or current.document.page_count == 0:
            return None
        return current.document.render(page_index, current.spec, container)

    async def export(
        self,
        sink: Optional[DownloadSink] = None,
        *,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> DownloadPlan:
        current = self._require_session()
        if current.document is None:
            raise EmptyInputError("The selected file is still loading.")
        if not sessions.can_export(current):
            raise ExportBlockedError("Generate a style or unlock the watermark before exporting.")
        if not current.spec.text:
            self._report(EmptyInputError("Watermark text is empty; nothing was exported."))
            return DownloadPlan()

        document = current.document
        results = document.export(
            current.spec,
            self.compositor,
            scale=self.settings.export_scale,
            on_error=self._report,
        )
        plan = packager.package(results, current.buffer.name, self.settings.download_delay_ms)

        if results and all(result is NOT_APPLICABLE for result in results):
            plan.settings_key = packager.persist_settings(
                self.store,
                current.spec,
                document_id=self.document_ref.id,
                user_id=self.user_id,
                generated_style=current.generated_style,
                is_locked=current.locked,
            )
        elif not plan.artifacts:
            logger.warning("No page of %s was exported", current.buffer.name)

        logger.info(
            "Export of %s (%s): %s artifact(s)",
            current.buffer.name,
            document.kind.value,
            len(plan.artifacts),
        )
        if sink is not None:
            await packager.deliver(plan, sink, sleep=sleep)
        return plan
