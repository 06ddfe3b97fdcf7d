from .file_storage import FileStorage, LocalFileStorage, FileStorageFactory

__all__ = [
    "FileStorage",
    "LocalFileStorage", 
    "FileStorageFactory",
]