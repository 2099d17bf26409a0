"""Credential construction for the two supported flows.

OAuth2 user credentials come from an authorization-code exchange driven by
google-auth-oauthlib; service-account credentials are signed from a JSON key
by google-auth. Neither flow's handshake is implemented here.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from google.oauth2 import credentials as user_credentials
from google.oauth2 import service_account
from google_auth_oauthlib.flow import Flow

from gdrive_client.drive.errors import DriveAuthError

if TYPE_CHECKING:
    from google.auth.credentials import Credentials

    from gdrive_client.config import AppConfig

logger = logging.getLogger(__name__)

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]

AUTH_MODE_OAUTH = "oauth"
AUTH_MODE_SERVICE_ACCOUNT = "service_account"


def oauth_flow_from_client_config(
    client_config: dict[str, Any],
    redirect_uri: str | None = None,
    scopes: list[str] | None = None,
) -> Flow:
    """Build the OAuth2 flow used to obtain a user token.

    Use ``flow.authorization_url()`` to start the flow and
    ``flow.fetch_token(code=...)`` to complete it.

    Args:
        client_config: Parsed OAuth client secrets JSON ("web" or "installed").
        redirect_uri: Redirect URI registered for the client.
        scopes: OAuth scopes; defaults to full Drive access.

    Raises:
        DriveAuthError: If the client config is malformed.
    """
    try:
        return Flow.from_client_config(
            client_config, scopes=scopes or DRIVE_SCOPES, redirect_uri=redirect_uri
        )
    except ValueError as exc:
        raise DriveAuthError(f"unable to parse OAuth client config: {exc}") from exc


def credentials_from_token(
    token_info: dict[str, Any],
    scopes: list[str] | None = None,
) -> Credentials:
    """Build user credentials from a stored authorized-user token.

    Raises:
        DriveAuthError: If required token fields are missing.
    """
    try:
        return user_credentials.Credentials.from_authorized_user_info(
            token_info, scopes=scopes or DRIVE_SCOPES
        )
    except ValueError as exc:
        raise DriveAuthError(f"unable to parse OAuth token: {exc}") from exc


def service_account_credentials(
    info: dict[str, Any],
    scopes: list[str] | None = None,
    subject: str | None = None,
) -> Credentials:
    """Build service-account credentials from a JSON key.

    Args:
        info: Parsed service account key file.
        scopes: OAuth scopes; defaults to full Drive access.
        subject: User to impersonate with domain-wide delegation.

    Raises:
        DriveAuthError: If the key is malformed.
    """
    try:
        creds = service_account.Credentials.from_service_account_info(
            info, scopes=scopes or DRIVE_SCOPES
        )
    except ValueError as exc:
        raise DriveAuthError(f"unable to parse service account credentials: {exc}") from exc
    if subject:
        creds = creds.with_subject(subject)
    return creds


def _read_json(path: str) -> dict[str, Any]:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))  # type: ignore[no-any-return]
    except (OSError, ValueError) as exc:
        raise DriveAuthError(f"unable to read credentials file {path}: {exc}") from exc


def credentials_from_config(config: AppConfig) -> Credentials:
    """Load credentials for the auth mode selected in configuration.

    Raises:
        DriveAuthError: If the mode is unknown or a file cannot be read.
    """
    if config.auth_mode == AUTH_MODE_SERVICE_ACCOUNT:
        logger.info("[credentials_from_config] using service account credentials")
        return service_account_credentials(
            _read_json(config.credentials_file), subject=config.subject
        )
    if config.auth_mode == AUTH_MODE_OAUTH:
        if not config.token_file:
            raise DriveAuthError("token file is required for oauth auth mode")
        logger.info("[credentials_from_config] using stored OAuth token")
        return credentials_from_token(_read_json(config.token_file))
    raise DriveAuthError(f"unknown auth mode: {config.auth_mode}")
