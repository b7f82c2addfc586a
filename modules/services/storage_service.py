"""File storage helpers."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional

from modules.pipelines.image_generation import GeneratedAsset

logger = logging.getLogger(__name__)

FILE_PREFIX = "prompt-studio"


class StorageService:
    """Save generated assets as downloadable files."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    def download_name(self, asset: GeneratedAsset, timestamp_ms: Optional[int] = None) -> str:
        """Return the file name offered for download."""
        stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
        return f"{FILE_PREFIX}-{stamp}.{asset.extension}"

    def save(self, asset: GeneratedAsset, timestamp_ms: Optional[int] = None) -> Path:
        """Persist an asset and return the file path."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        target = self.output_dir / self.download_name(asset, timestamp_ms)
        counter = 1
        while target.exists():
            target = target.with_name(f"{target.stem.split('_')[0]}_{counter}{target.suffix}")
            counter += 1
        target.write_bytes(asset.data)
        logger.info("Saved %s asset to %s", asset.media_type.label, target)
        return target

    def list_files(self) -> List[Path]:
        """Return stored assets, oldest first."""
        if not self.output_dir.exists():
            return []
        files = [path for path in self.output_dir.glob(f"{FILE_PREFIX}-*") if path.is_file()]
        return sorted(files, key=lambda path: (path.stat().st_mtime_ns, path.name))

    def cleanup(self, max_items: int = 100) -> int:
        """Limit the number of stored artifacts; return how many were removed."""
        files = self.list_files()
        excess = files[: max(len(files) - max_items, 0)]
        for path in excess:
            path.unlink(missing_ok=True)
        return len(excess)
