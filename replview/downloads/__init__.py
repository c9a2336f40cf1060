"""One-shot download tokens correlating URLs to in-memory resources."""

from .store import DownloadStore, FileResource, get_download_store, init_download_store

__all__ = ["DownloadStore", "FileResource", "get_download_store", "init_download_store"]
