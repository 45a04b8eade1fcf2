import logging
import re
import secrets
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from showcase.config import get_settings
from showcase.exceptions import UploadRejected
from showcase.schemas import UploadResponse

settings = get_settings()
logger = logging.getLogger(__name__)

# Archives and images only
ALLOWED_EXTENSIONS = re.compile(r"\.(zip|rar|7z|tar\.gz|jpg|jpeg|png|gif|webp)$", re.IGNORECASE)

CHUNK_SIZE = 1024 * 1024


class UploadService:
    """Stores uploaded files on local disk under random names"""

    def __init__(
        self,
        upload_dir: Optional[str] = None,
        max_bytes: Optional[int] = None,
        url_prefix: Optional[str] = None
    ):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.max_bytes = max_bytes or settings.UPLOAD_MAX_BYTES
        self.url_prefix = (url_prefix or settings.UPLOAD_URL_PREFIX).rstrip("/")

    @staticmethod
    def allowed_extension(filename: str) -> Optional[str]:
        """Return the normalized extension, or None if the type is refused"""
        match = ALLOWED_EXTENSIONS.search(filename)
        if not match:
            return None
        return match.group(0).lower()

    async def save(self, upload: Optional[UploadFile]) -> UploadResponse:
        if upload is None or not upload.filename:
            raise UploadRejected("No file uploaded")

        extension = self.allowed_extension(upload.filename)
        if extension is None:
            raise UploadRejected("Invalid file type")

        filename = secrets.token_urlsafe(16) + extension
        await run_in_threadpool(self.upload_dir.mkdir, parents=True, exist_ok=True)
        path = self.upload_dir / filename

        size = 0
        stored = False
        out = await run_in_threadpool(path.open, "wb")
        try:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > self.max_bytes:
                    raise UploadRejected(
                        "File too large",
                        status_code=413
                    )
                await run_in_threadpool(out.write, chunk)
            stored = True
        finally:
            out.close()
            # Never leave a partial file behind, whatever interrupted the copy
            if not stored:
                path.unlink(missing_ok=True)

        logger.info(f"Stored upload {upload.filename!r} as {filename} ({size} bytes)")
        return UploadResponse(url=f"{self.url_prefix}/{filename}", filename=filename)
