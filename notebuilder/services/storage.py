import logging
import os

from notebuilder.config import settings
from notebuilder.services.export import ExportArtifact

logger = logging.getLogger(__name__)


class StorageService:
    @staticmethod
    def session_dir(session_id: int) -> str:
        """Return the path for a session directory under sessions_root."""
        return os.path.join(settings.sessions_root, f"session_{session_id:04d}")

    @staticmethod
    def ensure_dirs(session_dir: str) -> None:
        """Create the standard subdirectory layout for a session."""
        os.makedirs(os.path.join(session_dir, "exports"), exist_ok=True)

    @staticmethod
    def write_text(path: str, text: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)

    @staticmethod
    def write_artifact(session_dir: str, artifact: ExportArtifact) -> str:
        """Write an export artifact under the session's exports/ and return its path."""
        StorageService.ensure_dirs(session_dir)
        path = os.path.join(session_dir, "exports", artifact.filename)
        StorageService.write_text(path, artifact.content)
        logger.info("Wrote %s (%d chars)", path, len(artifact.content))
        return path
