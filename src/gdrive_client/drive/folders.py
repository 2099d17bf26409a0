"""Folder index construction and folder-path resolution."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from gdrive_client.drive.errors import DriveError
from gdrive_client.drive.models import (
    FIELD_ID,
    FIELD_NAME,
    FIELD_PARENTS,
    FOLDER_MIME_TYPE,
    FOLDER_PAGE_SIZE,
    MAX_PATH_DEPTH,
    RESPONSE_FILES,
    RESPONSE_NEXT_PAGE_TOKEN,
    ROOT_PATH,
    FolderEntry,
    FolderIndex,
)

if TYPE_CHECKING:
    from gdrive_client.drive.cancel import CancelScope
    from gdrive_client.drive.client import DriveClient

logger = logging.getLogger(__name__)

FOLDER_QUERY = f"mimeType='{FOLDER_MIME_TYPE}'"
FOLDER_FIELDS = "nextPageToken, files(id, name, parents)"


def build_folder_index(
    client: DriveClient,
    scope: CancelScope,
    page_size: int = FOLDER_PAGE_SIZE,
) -> FolderIndex:
    """Fetch every folder visible to the credential and index it by ID.

    Follows nextPageToken until the listing is exhausted. The index is
    built fresh on each call and never cached.

    Args:
        client: Authenticated DriveClient.
        scope: Cancellation scope for the listing requests.
        page_size: Folders per request, clamped to 1..1000.

    Returns:
        Mapping of folder ID to FolderEntry.

    Raises:
        DriveError: If any page fails; no partial index is returned.
    """
    page_size = max(1, min(page_size, FOLDER_PAGE_SIZE))
    index: FolderIndex = {}
    page_token: str | None = None
    pages = 0

    while True:
        params: dict[str, str | int] = {
            "q": FOLDER_QUERY,
            "fields": FOLDER_FIELDS,
            "pageSize": page_size,
        }
        if page_token:
            params["pageToken"] = page_token
        try:
            response = client.get_json(
                scope, "/files", operation="unable to retrieve folders", params=params
            )
        except DriveError:
            logger.error("[build_folder_index] folder listing failed; pages_read:%d", pages)
            raise
        pages += 1

        for raw in response.get(RESPONSE_FILES, []):
            folder_id = raw.get(FIELD_ID)
            if not folder_id:
                continue
            index[folder_id] = FolderEntry(
                name=raw.get(FIELD_NAME, ""),
                parents=tuple(raw.get(FIELD_PARENTS) or ()),
            )

        page_token = response.get(RESPONSE_NEXT_PAGE_TOKEN)
        if not page_token:
            break

    logger.info("[build_folder_index] folder index built; folders:%d;pages:%d", len(index), pages)
    return index


def resolve_folder_path(
    parent_ids: Sequence[str],
    index: FolderIndex,
    root: str = ROOT_PATH,
    max_depth: int = MAX_PATH_DEPTH,
) -> str:
    """Resolve a human-readable folder path from a file's parent IDs.

    Only the first parent is followed. The walk stops at an unknown folder,
    a folder without parents, a folder already visited (cycle) or after
    ``max_depth`` levels; whatever was resolved up to that point is used.
    Broken chains are not errors.

    Args:
        parent_ids: Parent folder IDs of the file, possibly empty.
        index: Folder index from build_folder_index().
        root: Root path token.
        max_depth: Maximum number of folder levels to resolve.

    Returns:
        Path such as "My Drive/Projects/2024", or ``root`` alone.
    """
    if not parent_ids:
        return root

    segments: list[str] = []
    visited: set[str] = set()
    current: str | None = parent_ids[0]

    for _ in range(max_depth):
        if not current:
            break
        if current in visited:
            logger.debug("[resolve_folder_path] cycle detected; folder_id:%s", current)
            break
        visited.add(current)

        entry = index.get(current)
        if entry is None:
            logger.debug("[resolve_folder_path] folder not in index; folder_id:%s", current)
            break

        segments.append(entry.name)
        current = entry.parents[0] if entry.parents else None

    if not segments:
        return root
    segments.reverse()
    return "/".join([root, *segments])
