"""
Resume file storage.

Services only talk to the `ResumeStorage` interface: `save` returns a URL
that is persisted on the application, `delete` removes what `save` stored.
The local-disk backend serves its files back through the resume download
endpoint.
"""
import logging
import time
from pathlib import Path
from typing import Optional
from uuid import UUID

from werkzeug.utils import secure_filename

from jobboard.config import settings
from jobboard.services.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".pdf", ".doc", ".docx"}


class StorageError(Exception):
    """Raised when a backend cannot store or read a file."""
    pass


class ResumeStorage:
    """Interface for resume storage backends."""
    
    def save(self, content: bytes, filename: str, applicant_id: UUID, job_id: UUID) -> str:
        """Store the file and return its retrieval URL. Raises StorageError."""
        raise NotImplementedError
    
    def delete(self, url: str) -> None:
        """Remove a previously stored file. Never raises."""
        raise NotImplementedError
    
    def resolve_path(self, url: str) -> Optional[Path]:
        """Local path for a URL this backend stored, or None."""
        return None


class LocalResumeStorage(ResumeStorage):
    """Stores resumes under a directory on local disk."""
    
    def __init__(self, base_dir: Path, url_prefix: str):
        self.base_dir = Path(base_dir)
        self.url_prefix = url_prefix.rstrip("/")
    
    def save(self, content: bytes, filename: str, applicant_id: UUID, job_id: UUID) -> str:
        ext = Path(secure_filename(filename or "")).suffix.lower()
        stored_name = f"{applicant_id}-{job_id}-{int(time.time() * 1000)}{ext}"
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            (self.base_dir / stored_name).write_bytes(content)
        except OSError as e:
            raise StorageError(f"Failed to save file locally: {e}") from e
        
        logger.info(f"Stored resume {stored_name} ({len(content)} bytes)")
        return f"{self.url_prefix}/{stored_name}"
    
    def delete(self, url: str) -> None:
        path = self.resolve_path(url)
        if path is None:
            return
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to delete resume file {path}: {str(e)}")
    
    def resolve_path(self, url: str) -> Optional[Path]:
        if not url or not url.startswith(self.url_prefix + "/"):
            return None
        name = secure_filename(url[len(self.url_prefix) + 1:])
        if not name:
            return None
        return self.base_dir / name


def validate_resume_file(filename: Optional[str], size: int) -> None:
    """
    Validate an uploaded resume before it is stored.
    
    Raises:
        ValidationError: wrong extension or larger than the configured limit
    """
    ext = Path(filename or "").suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(
            "Invalid file type. Only PDF, DOC, and DOCX files are allowed."
        )
    
    max_size = settings.max_resume_size_mb * 1024 * 1024
    if size > max_size:
        raise ValidationError(f"File size exceeds {settings.max_resume_size_mb}MB limit.")


def get_resume_storage() -> ResumeStorage:
    """FastAPI dependency for the configured storage backend."""
    return LocalResumeStorage(Path(settings.upload_dir), settings.upload_url_prefix)
