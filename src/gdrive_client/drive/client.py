"""Google Drive v3 REST client over an authorized requests session."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Collection, Iterator
from typing import TYPE_CHECKING, Any

import requests
from google.auth.transport.requests import AuthorizedSession

from gdrive_client.drive.auth import credentials_from_config
from gdrive_client.drive.errors import (
    DriveApiError,
    DriveCancelledError,
    DriveTransportError,
)

if TYPE_CHECKING:
    from google.auth.credentials import Credentials

    from gdrive_client.config import AppConfig
    from gdrive_client.drive.cancel import CancelScope

logger = logging.getLogger(__name__)

DRIVE_BASE_URL = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3"
DEFAULT_REQUEST_TIMEOUT = 60.0

_SUCCESS = frozenset(range(200, 300))


def _error_detail(response: requests.Response) -> tuple[str, str]:
    """Extract (message, reason) from a Drive error body."""
    try:
        error = response.json().get("error", {})
    except ValueError:
        return response.reason or "", ""
    if not isinstance(error, dict):
        return str(error), ""
    message = error.get("message") or response.reason or ""
    errors = error.get("errors") or []
    reason = errors[0].get("reason", "") if errors and isinstance(errors[0], dict) else ""
    return message, reason


def raise_for_status(
    response: requests.Response,
    operation: str,
    accepted: Collection[int] = _SUCCESS,
) -> None:
    """Raise DriveApiError unless the response status is in ``accepted``.

    Args:
        response: Response to inspect.
        operation: Operation name used as error context.
        accepted: Status codes treated as success.

    Raises:
        DriveApiError: If the status code is not accepted.
    """
    if response.status_code in accepted:
        return
    message, reason = _error_detail(response)
    logger.info(
        "[raise_for_status] request rejected; operation:%s;status:%d;reason:%s",
        operation,
        response.status_code,
        reason,
    )
    raise DriveApiError(response.status_code, message, reason=reason, operation=operation)


class DriveClient:
    """Authenticated client for the Drive v3 REST API.

    Holds no per-call state, so one instance can serve concurrent callers.
    No retry adapter is mounted on the session.
    """

    def __init__(
        self,
        credentials: Credentials | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialise the authorized session.

        Args:
            credentials: google-auth credentials carrying Drive scopes. Ignored
                when ``session`` is given.
            request_timeout: Upper bound in seconds for any single request.
            session: Pre-built session, e.g. an existing AuthorizedSession.
        """
        if session is None:
            if credentials is None:
                raise ValueError("either credentials or session is required")
            session = AuthorizedSession(credentials)
        self._session = session
        self._timeout = request_timeout

    @staticmethod
    def url(path: str, upload: bool = False) -> str:
        """Absolute URL for an API path (must start with '/')."""
        base = DRIVE_UPLOAD_URL if upload else DRIVE_BASE_URL
        return f"{base}{path}"

    def send(
        self,
        scope: CancelScope,
        method: str,
        url: str,
        *,
        operation: str,
        stream: bool = False,
        **kwargs: Any,
    ) -> requests.Response:
        """Issue a single request, honouring the scope's cancellation and deadline.

        The status code is not inspected here. A response that arrives after
        the scope fired is closed and discarded.

        Raises:
            DriveCancelledError: If the scope fired before or during the request.
            DriveTransportError: If the request failed without a response.
        """
        scope.check(operation)
        timeout = scope.request_timeout(self._timeout)
        try:
            response = self._session.request(
                method, url, timeout=timeout, stream=stream, **kwargs
            )
        except DriveCancelledError:
            raise
        except requests.RequestException as exc:
            if scope.cancelled:
                raise DriveCancelledError(f"{operation}: cancelled") from exc
            logger.error("[send] request failed; operation:%s;error:%s", operation, exc)
            raise DriveTransportError(f"{operation}: {exc}", operation=operation) from exc
        if scope.cancelled:
            response.close()
            logger.info("[send] response discarded after cancel; operation:%s", operation)
            scope.check(operation)
        return response

    def get_json(
        self,
        scope: CancelScope,
        path: str,
        *,
        operation: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform an authenticated GET and return the parsed JSON body.

        Raises:
            DriveApiError: If the API returns a non-2xx status code.
        """
        return self.request_json(scope, "GET", path, operation=operation, params=params)

    def request_json(
        self,
        scope: CancelScope,
        method: str,
        path: str,
        *,
        operation: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform an authenticated request with an optional JSON body.

        Returns:
            Parsed JSON response, or an empty dict for empty (e.g. 204) responses.

        Raises:
            DriveApiError: If the API returns a non-2xx status code.
        """
        response = self.send(
            scope, method, self.url(path), operation=operation, params=params, json=body
        )
        with contextlib.closing(response):
            raise_for_status(response, operation)
            if not response.content:
                return {}
            return response.json()  # type: ignore[no-any-return]

    @contextlib.contextmanager
    def open_stream(
        self,
        scope: CancelScope,
        method: str,
        url: str,
        *,
        operation: str,
        accepted: Collection[int] = (200,),
        **kwargs: Any,
    ) -> Iterator[requests.Response]:
        """Open a streamed response whose status is in ``accepted``.

        The response is closed on every exit path.

        Raises:
            DriveApiError: If the status code is not accepted.
        """
        response = self.send(scope, method, url, operation=operation, stream=True, **kwargs)
        try:
            raise_for_status(response, operation, accepted)
            yield response
        finally:
            response.close()

    def close(self) -> None:
        self._session.close()


def drive_client_from_config(config: AppConfig) -> DriveClient:
    """Construct a DriveClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured DriveClient instance.
    """
    return DriveClient(
        credentials=credentials_from_config(config),
        request_timeout=config.request_timeout,
    )
