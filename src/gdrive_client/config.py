"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing. Tuning values
    have defaults matching the Drive client's built-in constants but can be
    overridden via environment variables.
    """

    # Required, no defaults
    auth_mode: str
    credentials_file: str

    # Optional auth settings
    token_file: str | None = None
    subject: str | None = None

    # Transport and enumeration tuning
    request_timeout: float = 60.0
    chunk_size: int = 1024 * 1024
    list_page_size: int = 100
    folder_page_size: int = 1000
    root_path: str = "My Drive"
    max_path_depth: int = 10


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        GDC_AUTH_MODE: "oauth" or "service_account".
        GDC_CREDENTIALS_FILE: OAuth client secrets or service account key JSON.

    Optional environment variables (with defaults):
        GDC_TOKEN_FILE: Stored authorized-user token JSON (required for oauth).
        GDC_SUBJECT: User to impersonate with a service account.
        GDC_REQUEST_TIMEOUT: Per-request timeout in seconds (default: 60).
        GDC_CHUNK_SIZE: Streaming chunk size in bytes (default: 1048576).
        GDC_LIST_PAGE_SIZE: Files per listing page (default: 100).
        GDC_FOLDER_PAGE_SIZE: Folders per folder-index page (default: 1000).
        GDC_ROOT_PATH: Root token for resolved paths (default: My Drive).
        GDC_MAX_PATH_DEPTH: Folder levels resolved per path (default: 10).

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        auth_mode=os.environ["GDC_AUTH_MODE"],
        credentials_file=os.environ["GDC_CREDENTIALS_FILE"],
        token_file=os.environ.get("GDC_TOKEN_FILE") or None,
        subject=os.environ.get("GDC_SUBJECT") or None,
        request_timeout=float(os.environ.get("GDC_REQUEST_TIMEOUT", "60")),
        chunk_size=int(os.environ.get("GDC_CHUNK_SIZE", str(1024 * 1024))),
        list_page_size=int(os.environ.get("GDC_LIST_PAGE_SIZE", "100")),
        folder_page_size=int(os.environ.get("GDC_FOLDER_PAGE_SIZE", "1000")),
        root_path=os.environ.get("GDC_ROOT_PATH", "My Drive"),
        max_path_depth=int(os.environ.get("GDC_MAX_PATH_DEPTH", "10")),
    )
