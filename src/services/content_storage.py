"""Local filesystem storage for uploaded track content."""

import logging
import secrets
import time
from pathlib import Path

from starlette.concurrency import run_in_threadpool

from src.utils.validators import UploadFileValidator

logger = logging.getLogger(__name__)


class LocalContentStorage:
    """Stores uploaded bytes under a generated name and hands back that name."""

    def __init__(self, upload_dir: str):
        self.root = Path(upload_dir).resolve()

    def _generate_ref(self, original_filename: str) -> str:
        extension = UploadFileValidator.extension_of(original_filename)
        return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{extension}"

    def path_for(self, content_ref: str) -> Path:
        """Resolve a reference, refusing anything that escapes the upload root."""
        path = (self.root / content_ref).resolve()
        if path.parent != self.root:
            raise ValueError(f"Invalid content reference: {content_ref}")
        return path

    def exists(self, content_ref: str) -> bool:
        try:
            return self.path_for(content_ref).is_file()
        except ValueError:
            return False

    async def store(self, data: bytes, original_filename: str) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        content_ref = self._generate_ref(original_filename)
        await run_in_threadpool(self.path_for(content_ref).write_bytes, data)
        logger.info(f"Stored {len(data)} bytes as {content_ref}")
        return content_ref
