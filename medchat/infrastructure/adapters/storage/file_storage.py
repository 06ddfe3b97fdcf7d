"""
Attachment File Storage

Stores uploaded attachment bytes under
``attachments/<session_id>/<attachment_id>/<filename>``.
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional
import logging
import shutil

from ...config.settings import FileStorageSettings
from medchat.shared.exceptions import FileStorageError, ConfigurationError


logger = logging.getLogger(__name__)


class FileStorage(ABC):
    """
    Abstract interface for attachment file storage.

    Paths are relative to the storage root and always use forward slashes.
    """

    @abstractmethod
    async def save_file(
        self,
        file_data: BinaryIO,
        file_path: str,
        content_type: Optional[str] = None
    ) -> str:
        """
        Write a file, replacing anything already stored at the path.

        Args:
            file_data: Readable binary stream
            file_path: Relative destination path
            content_type: MIME type, for backends that record it

        Returns:
            The normalized relative path that was written

        Raises:
            FileStorageError: If the write fails
        """
        pass

    @abstractmethod
    async def get_file(self, file_path: str) -> BinaryIO:
        """
        Open a stored file for reading. The caller closes the handle.

        Raises:
            FileStorageError: If the file is missing or unreadable
        """
        pass

    @abstractmethod
    async def delete_file(self, file_path: str) -> bool:
        """Delete one file; False if it was not there."""
        pass

    @abstractmethod
    async def delete_directory(self, directory: str) -> bool:
        """Delete everything stored under a directory prefix."""
        pass


class LocalFileStorage(FileStorage):
    """
    Keeps attachments on the local filesystem below ``upload_dir``.
    """

    def __init__(self, settings: FileStorageSettings):
        self._base_path = Path(settings.upload_dir)
        self._base_path.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base_path

    async def save_file(
        self,
        file_data: BinaryIO,
        file_path: str,
        content_type: Optional[str] = None
    ) -> str:
        relative, target = self._resolve(file_path, "save")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, 'wb') as out:
                shutil.copyfileobj(file_data, out)
        except OSError as e:
            raise FileStorageError(f"Failed to save file {file_path}: {str(e)}", file_path, "save")

        logger.debug(f"Stored attachment file {relative}")
        return relative

    async def get_file(self, file_path: str) -> BinaryIO:
        _, target = self._resolve(file_path, "get")
        if not target.is_file():
            raise FileStorageError(f"File not found: {file_path}", file_path, "get")
        try:
            return open(target, 'rb')
        except OSError as e:
            raise FileStorageError(f"Failed to open file {file_path}: {str(e)}", file_path, "get")

    async def delete_file(self, file_path: str) -> bool:
        _, target = self._resolve(file_path, "delete")
        if not target.exists():
            return False
        try:
            target.unlink()
        except OSError as e:
            raise FileStorageError(f"Failed to delete file {file_path}: {str(e)}", file_path, "delete")

        self._prune_empty_parents(target.parent)
        return True

    async def delete_directory(self, directory: str) -> bool:
        relative, target = self._resolve(directory, "delete")
        if not relative or not target.is_dir():
            return False
        try:
            shutil.rmtree(target)
        except OSError as e:
            raise FileStorageError(f"Failed to delete directory {directory}: {str(e)}", directory, "delete")

        logger.debug(f"Removed attachment directory {relative}")
        return True

    def _resolve(self, file_path: str, operation: str):
        """
        Normalize a relative path and map it below the storage root.

        Raises:
            FileStorageError: If the path tries to leave the storage root
        """
        relative = file_path.replace('\\', '/').lstrip('/')
        if any(part == '..' for part in relative.split('/')):
            raise FileStorageError(f"Invalid file path: {file_path}", file_path, operation)
        return relative, self._base_path / relative

    def _prune_empty_parents(self, directory: Path) -> None:
        # Stops at the first non-empty directory or at the storage root
        base = self._base_path.resolve()
        current = directory.resolve()
        while current != base and base in current.parents:
            try:
                current.rmdir()
            except OSError:
                break
            current = current.parent


class FileStorageFactory:
    """Builds the storage backend named by ``storage_type``."""

    @staticmethod
    def create_storage(settings: FileStorageSettings) -> FileStorage:
        storage_type = settings.storage_type.lower()

        if storage_type == "local":
            return LocalFileStorage(settings)

        raise ConfigurationError(f"Unsupported storage type: {storage_type}", "STORAGE_TYPE")


def generate_attachment_path(session_id: str, attachment_id: str, filename: str) -> str:
    return f"attachments/{session_id}/{attachment_id}/{filename}"


def session_attachment_directory(session_id: str) -> str:
    return f"attachments/{session_id}"
