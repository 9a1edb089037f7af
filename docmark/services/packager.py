from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Sequence, Union

from docmark.core.logging import configure_logging
from docmark.models import (
    DownloadArtifact,
    DownloadPlan,
    GeneratedStyle,
    ImageBytes,
    NotApplicable,
    PersistedWatermark,
    WatermarkSpec,
)
from docmark.storage.downloads import DownloadSink
from docmark.storage.settings_store import KeyValueStore
from docmark.utils.file_utils import split_name

logger = configure_logging("packager")

PREFIX = "watermarked_"
DEFAULT_DELAY_MS = 500

_EXTENSIONS = {"PNG": {".png"}, "JPEG": {".jpg", ".jpeg"}}


def settings_key(document_id: str) -> str:
    return f"watermark-{document_id}"


def _single_name(result: ImageBytes, base_name: str) -> str:
    stem, suffix = split_name(base_name)
    if suffix.lower() in _EXTENSIONS.get(result.format, set()):
        return f"{PREFIX}{base_name}"
    return f"{PREFIX}{stem}.{result.extension}"


def package(
    results: Sequence[Union[ImageBytes, NotApplicable]],
    base_name: str,
    delay_ms: int = DEFAULT_DELAY_MS,
) -> DownloadPlan:
    """Turn per-page export results into the downloads to trigger.

    A plan without artifacts means nothing could be embedded; the caller then
    persists the settings instead (see ``persist_settings``).
    """
    images = [result for result in results if isinstance(result, ImageBytes)]
    if not images:
        return DownloadPlan()

    if len(images) == 1:
        return DownloadPlan(artifacts=[DownloadArtifact(_single_name(images[0], base_name), images[0].data)])

    stem, _ = split_name(base_name)
    artifacts: List[DownloadArtifact] = []
    for position, image in enumerate(images):
        artifacts.append(
            DownloadArtifact(
                filename=f"{PREFIX}{stem}_page{image.page_number}.{image.extension}",
                data=image.data,
                delay_ms=0 if position == 0 else delay_ms,
            )
        )
    return DownloadPlan(artifacts=artifacts)


def persist_settings(
    store: KeyValueStore,
    spec: WatermarkSpec,
    *,
    document_id: str,
    user_id: str,
    generated_style: Optional[GeneratedStyle] = None,
    is_locked: bool = False,
    created_at: Optional[datetime] = None,
) -> str:
    """Store the full watermark settings for a document that has no pixel output."""
    record = PersistedWatermark(
        document_id=document_id,
        text=spec.text,
        location=spec.anchor,
        opacity=spec.opacity,
        rotation=spec.rotation,
        font=spec.font_family,
        font_size=spec.font_size,
        color=spec.color,
        page_range=spec.page_range,
        generated_style=generated_style,
        is_locked=is_locked,
        created_by=user_id,
        created_at=created_at or datetime.now(timezone.utc),
    )
    key = settings_key(document_id)
    store.set(key, record.to_record())
    logger.info("Persisted watermark settings under %s", key)
    return key


async def deliver(
    plan: DownloadPlan,
    sink: DownloadSink,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> int:
    """Trigger each download in order, waiting the planned delay before each one."""
    sleep = sleep or asyncio.sleep
    for artifact in plan.artifacts:
        if artifact.delay_ms:
            await sleep(artifact.delay_ms / 1000)
        sink.trigger(artifact)
        logger.info("Triggered download %s (%s bytes)", artifact.filename, len(artifact.data))
    return len(plan.artifacts)
