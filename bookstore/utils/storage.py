# bookstore/utils/storage.py
import logging
import uuid
from pathlib import Path

from bookstore.config import settings

logger = logging.getLogger(__name__)


class BlobStorage:
    """Stores an uploaded payload and returns the public URL it is served at."""

    def save(self, filename: str, content: bytes) -> str:
        raise NotImplementedError


class LocalBlobStorage(BlobStorage):
    # Files land in upload_dir under a random name and are mounted at public_base_url
    def __init__(self, upload_dir=None, public_base_url=None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")

    def save(self, filename: str, content: bytes) -> str:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        ext = Path(filename or "").suffix.lower()
        unique_filename = f"{uuid.uuid4()}{ext}"
        save_path = self.upload_dir / unique_filename
        with open(save_path, "wb") as buffer:
            buffer.write(content)
        logger.info("Stored upload %s (%d bytes)", unique_filename, len(content))
        return f"{self.public_base_url}/{unique_filename}"


_storage: BlobStorage = LocalBlobStorage()


# FastAPI dependency; tests override it with a storage pointed at a temp dir
def get_storage() -> BlobStorage:
    return _storage
