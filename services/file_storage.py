"""
PMS - Local file storage for lead documents and remark attachments

Files are opaque blobs; the rest of the system only sees "/uploads/<name>".
Removal is best-effort: a missing or locked file is logged, never raised.
"""

import logging
import random
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger("file_storage")

URL_PREFIX = "/uploads"


class LocalFileStorage:
    def __init__(self, upload_dir):
        self.upload_dir = Path(upload_dir)

    def _unique_name(self, original_name: str) -> str:
        # <base>-<millis>-<random><ext>, same shape as the upload URLs clients already hold
        name = Path(original_name or "file").name
        ext = Path(name).suffix
        base = Path(name).stem or "file"
        suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10 ** 9)}"
        return f"{base}-{suffix}{ext}"

    async def store(self, upload) -> str:
        """Persist an UploadFile and return its public URL."""
        content = await upload.read()
        filename = self._unique_name(upload.filename)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        with open(self.upload_dir / filename, "wb") as f:
            f.write(content)
        return f"{URL_PREFIX}/{filename}"

    def _path_for(self, file_url: str) -> Optional[Path]:
        if not file_url or not file_url.startswith(f"{URL_PREFIX}/"):
            return None
        return self.upload_dir / Path(file_url).name

    async def remove(self, file_url: str) -> None:
        path = self._path_for(file_url)
        if path is None:
            logger.warning(f"[FILE_REMOVE] not a local upload url: {file_url}")
            return
        try:
            path.unlink()
        except OSError as e:
            logger.warning(f"[FILE_REMOVE] {file_url}: {e}")


_storage: Optional[LocalFileStorage] = None


def get_file_storage() -> LocalFileStorage:
    """FastAPI dependency"""
    global _storage
    if _storage is None:
        from config import UPLOAD_DIR
        _storage = LocalFileStorage(UPLOAD_DIR)
    return _storage
