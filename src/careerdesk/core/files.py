from __future__ import annotations

import logging
import re
import time
import uuid
from pathlib import Path

from careerdesk.config import Settings, get_settings
from careerdesk.core.errors import CleanupWarning, ValidationError

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"
LOGO_NAMESPACE = "company_logos"
RESUME_NAMESPACE = "resumes"

ALLOWED_EXTENSIONS: dict[str, set[str]] = {
    LOGO_NAMESPACE: {".png", ".jpg", ".jpeg", ".gif", ".webp"},
    RESUME_NAMESPACE: {".pdf"},
}


def safe_filename(filename: str) -> str:
    name = re.sub(r"\s+", "_", Path(filename).name)
    return re.sub(r"[^a-zA-Z0-9_.-]", "", name) or "upload"


class FileStager:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.root = Path(self.settings.upload_dir)

    def stage(self, namespace: str, filename: str, content: bytes) -> str:
        allowed = ALLOWED_EXTENSIONS.get(namespace)
        if allowed is None:
            raise ValueError(f"unknown upload namespace '{namespace}'")

        extension = Path(filename or "").suffix.lower()
        if extension not in allowed:
            raise ValidationError(f"Unsupported file type '{extension}'. Allowed: {', '.join(sorted(allowed))}")
        if not content:
            raise ValidationError("Uploaded file is empty")
        if len(content) > self.settings.upload_max_bytes:
            raise ValidationError(f"File too large. Maximum size: {self.settings.upload_max_bytes} bytes")

        stored_name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{safe_filename(filename)}"
        target_dir = self.root / namespace
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / stored_name).write_bytes(content)
        return f"{URL_PREFIX}/{namespace}/{stored_name}"

    def resolve(self, ref: str) -> Path | None:
        if not ref or not ref.startswith(f"{URL_PREFIX}/"):
            return None
        candidate = (self.root / ref[len(URL_PREFIX) + 1 :]).resolve()
        if not candidate.is_relative_to(self.root.resolve()):
            return None
        return candidate

    def release(self, ref: str | None) -> bool:
        """Delete a staged file. The default logo and foreign paths are never touched."""
        if not ref or ref == self.settings.default_logo_path:
            return False
        path = self.resolve(ref)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise CleanupWarning(f"could not delete {ref}: {exc}") from exc
        return True

    def discard(self, ref: str | None) -> None:
        try:
            if self.release(ref):
                logger.info("Released staged file %s", ref)
        except CleanupWarning as warning:
            logger.warning("Cleanup failed: %s", warning.message)
