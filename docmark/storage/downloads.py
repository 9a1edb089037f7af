from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol
from uuid import uuid4

from docmark.core.config import get_settings
from docmark.models import DownloadArtifact


class DownloadSink(Protocol):
    def trigger(self, artifact: DownloadArtifact) -> None: ...


class DirectorySink:
    """Writes each triggered download into a directory, never overwriting."""

    def __init__(self, target_dir: Optional[Path] = None) -> None:
        self.target_dir = Path(target_dir or get_settings().downloads_dir)
        self.target_dir.mkdir(parents=True, exist_ok=True)
        self.written: List[Path] = []

    def trigger(self, artifact: DownloadArtifact) -> None:
        target = self.target_dir / artifact.filename
        if target.exists():
            target = self.target_dir / f"{target.stem}-{uuid4().hex[:6]}{target.suffix}"
        target.write_bytes(artifact.data)
        self.written.append(target)


class CollectingSink:
    """Keeps triggered downloads in memory."""

    def __init__(self) -> None:
        self.artifacts: List[DownloadArtifact] = []

    def trigger(self, artifact: DownloadArtifact) -> None:
        self.artifacts.append(artifact)
