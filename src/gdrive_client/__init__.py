"""Google Drive file-storage client with folder-path resolution and streaming transfers."""

__version__ = "0.1.0"
