# src/mbot/documents/file_provider.py

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class DocumentUnavailable(RuntimeError):
    """The checklist document could not be read (missing file, permissions, I/O, encoding)."""

    def __init__(self, location: str, reason: str) -> None:
        super().__init__(f"{location}: {reason}")
        self.location = location
        self.reason = reason


class FileDocumentProvider:
    """
    Reads checklist documents from the local filesystem.

    Relative locations are resolved against base_dir (current directory if None).
    No retries here: the scheduler simply tries again on the next tick.
    """

    def __init__(self, base_dir: str | Path | None = None, *, encoding: str = "utf-8") -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.encoding = encoding

    def resolve(self, location: str) -> Path:
        path = Path(location).expanduser()
        if self.base_dir is not None and not path.is_absolute():
            path = self.base_dir / path
        return path

    def read_text(self, location: str) -> str:
        path = self.resolve(location)
        try:
            text = path.read_text(self.encoding)
        except FileNotFoundError as e:
            raise DocumentUnavailable(location, "file not found") from e
        except PermissionError as e:
            raise DocumentUnavailable(location, "permission denied") from e
        except IsADirectoryError as e:
            raise DocumentUnavailable(location, "is a directory") from e
        except UnicodeDecodeError as e:
            raise DocumentUnavailable(location, f"not valid {self.encoding} text") from e
        except OSError as e:
            raise DocumentUnavailable(location, e.strerror or repr(e)) from e

        logger.debug("Read %d chars from %s", len(text), path)
        return text
