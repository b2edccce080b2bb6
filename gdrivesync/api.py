"""API client for Google Drive."""

from __future__ import annotations

import json
import logging
import socket
import threading
from pathlib import Path
from typing import Any

import httplib2
from google.auth.credentials import Credentials
from google.auth.exceptions import RefreshError, TransportError
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError, ResumableUploadError
from googleapiclient.http import HttpRequest, MediaFileUpload

from .exceptions import (
    DriveAPIError,
    DriveAuthenticationError,
    DriveConfigError,
    DriveFileNotFoundError,
    DriveInvalidResponseError,
    DriveNetworkError,
    DriveNotFoundError,
    DrivePermissionError,
    DriveRateLimitError,
    DriveUploadError,
)
from .models import DriveFile, FileListResult
from .utils import DEFAULT_PAGE_SIZE, detect_mime_type, escape_query_value

logger = logging.getLogger(__name__)

FILE_FIELDS = "id, name, mimeType, size, modifiedTime, parents, trashed"
LIST_FIELDS = f"nextPageToken, files({FILE_FIELDS})"

_NETWORK_ERRORS = (
    httplib2.HttpLib2Error,
    ConnectionError,
    TimeoutError,
    socket.gaierror,
    TransportError,
)


class DriveClient:
    """Client for the Google Drive v3 API.

    Requests go through ``googleapiclient``. Its HTTP transport is not
    thread-safe, so every thread gets its own service object.
    """

    def __init__(
        self,
        api_key: str | None = None,
        credentials: Credentials | None = None,
        http: httplib2.Http | None = None,
    ):
        """Initialize Google Drive API client.

        Args:
            api_key: API key sent as the ``key`` query parameter
            credentials: OAuth credentials; refreshed by the transport
                when they expire
            http: Pre-built HTTP object shared by all threads (used by tests)
        """
        self.api_key = api_key
        self.credentials = credentials
        self._http = http

        if not self.api_key and self.credentials is None:
            raise DriveConfigError(
                "No credentials configured. Set CLIENT_ID and CLIENT_SECRET "
                "or API_KEY environment variables."
            )

        self._local = threading.local()
        self._services: list[Resource] = []
        self._lock = threading.Lock()

    def _build_service(self) -> Resource:
        if self._http is not None:
            return build(
                "drive",
                "v3",
                http=self._http,
                developerKey=self.api_key,
                cache_discovery=False,
            )
        if self.credentials is not None:
            return build(
                "drive", "v3", credentials=self.credentials, cache_discovery=False
            )
        return build("drive", "v3", developerKey=self.api_key, cache_discovery=False)

    def _files(self) -> Any:
        """The ``files`` collection of this thread's service."""
        service = getattr(self._local, "service", None)
        if service is None:
            service = self._build_service()
            self._local.service = service
            with self._lock:
                self._services.append(service)
        return service.files()

    def close(self) -> None:
        """Close the HTTP connections of every service built so far."""
        with self._lock:
            services, self._services = self._services, []
            self._local = threading.local()
        if self._http is not None:
            return
        for service in services:
            service.close()

    def __enter__(self) -> DriveClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _handle_http_error(self, e: HttpError) -> DriveAPIError:
        """Translate an HTTP error response into a DriveAPIError."""
        status_code = e.resp.status
        detail = None
        try:
            error_data = json.loads(e.content)
            if isinstance(error_data, dict):
                error = error_data.get("error")
                if isinstance(error, dict):
                    detail = error.get("message")
                elif isinstance(error, str):
                    detail = error_data.get("error_description") or error
        except (TypeError, ValueError):
            # Body is not JSON, fall back to the status based message
            pass

        if status_code == 401:
            message = "Invalid credentials or unauthorized access"
            error_cls: type[DriveAPIError] = DriveAuthenticationError
        elif status_code == 403:
            message = "Access forbidden - check your permissions"
            error_cls = DrivePermissionError
        elif status_code == 404:
            message = "Resource not found"
            error_cls = DriveNotFoundError
        elif status_code == 429:
            message = "Rate limit exceeded - please try again later"
            error_cls = DriveRateLimitError
        else:
            message = f"API request failed with status {status_code}"
            error_cls = DriveAPIError

        if detail:
            message = f"{message}: {detail}"
        return error_cls(message)

    def _execute(self, request: HttpRequest) -> dict[str, Any]:
        """Execute a request and return the decoded JSON body.

        Raises:
            DriveAPIError: On HTTP error status, transport failure or an
                undecodable response
        """
        logger.debug(f"{request.method} {request.uri}")
        try:
            data = request.execute()
        except ResumableUploadError as e:
            raise DriveUploadError(
                f"Upload session could not be started (status {e.resp.status})"
            ) from e
        except HttpError as e:
            raise self._handle_http_error(e) from e
        except RefreshError as e:
            raise DriveAuthenticationError(f"Unable to refresh token: {e}") from e
        except _NETWORK_ERRORS as e:
            raise DriveNetworkError(f"Network error: {e}") from e
        except ValueError as e:
            raise DriveInvalidResponseError(
                "Invalid JSON response from server"
            ) from e

        if data is None or data == "":
            return {}
        if not isinstance(data, dict):
            raise DriveInvalidResponseError(
                f"Unexpected response type: {type(data).__name__}"
            )
        return data

    # =========================
    # Listing
    # =========================

    def list_files(
        self,
        query: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: str | None = None,
        fields: str = LIST_FIELDS,
        order_by: str | None = None,
    ) -> FileListResult:
        """List files visible to the caller.

        Args:
            query: Drive search query (``q`` parameter)
            page_size: Maximum number of files per page
            page_token: Token of the page to fetch
            fields: Partial response field selector
            order_by: Optional sort order, e.g. "name"

        Returns:
            One page of results
        """
        params: dict[str, Any] = {"pageSize": page_size, "fields": fields}
        if query:
            params["q"] = query
        if page_token:
            params["pageToken"] = page_token
        if order_by:
            params["orderBy"] = order_by

        data = self._execute(self._files().list(**params))
        return FileListResult.from_api_response(data)

    def find_file(self, name: str, parent_id: str) -> DriveFile | None:
        """Find a non-trashed file by exact name inside a folder.

        Args:
            name: File name to look for
            parent_id: ID of the folder to search

        Returns:
            The first match, or None if no file has that name
        """
        query = (
            f"name='{escape_query_value(name)}' and "
            f"'{escape_query_value(parent_id)}' in parents and trashed=false"
        )
        result = self.list_files(query=query, page_size=10)
        for drive_file in result.files:
            if not drive_file.is_folder:
                return drive_file
        return None

    def get_file(self, file_id: str) -> DriveFile:
        """Fetch metadata of a single file or folder."""
        data = self._execute(self._files().get(fileId=file_id, fields=FILE_FIELDS))
        return DriveFile.from_api_response(data)

    # =========================
    # Upload Operations
    # =========================

    def _media(self, file_path: Path, mime_type: str) -> MediaFileUpload:
        if not file_path.is_file():
            raise DriveFileNotFoundError(str(file_path))
        try:
            return MediaFileUpload(str(file_path), mimetype=mime_type, resumable=True)
        except FileNotFoundError as e:
            raise DriveFileNotFoundError(str(file_path)) from e

    def create_file(
        self,
        file_path: Path,
        parent_id: str,
        name: str | None = None,
        mime_type: str | None = None,
    ) -> DriveFile:
        """Create a new file with content in a folder.

        The content is sent through a resumable upload session.

        Args:
            file_path: Local file to upload
            parent_id: Destination folder ID
            name: Remote name (defaults to the local file name)
            mime_type: Content type (detected from the name if not given)

        Returns:
            The created file
        """
        mime_type = mime_type or detect_mime_type(file_path)
        media = self._media(file_path, mime_type)
        metadata = {
            "name": name or file_path.name,
            "parents": [parent_id],
            "mimeType": mime_type,
        }
        try:
            request = self._files().create(
                body=metadata, media_body=media, fields=FILE_FIELDS
            )
            data = self._execute(request)
        finally:
            media.stream().close()
        return DriveFile.from_api_response(data)

    def update_file(
        self,
        file_id: str,
        file_path: Path,
        mime_type: str | None = None,
    ) -> DriveFile:
        """Replace the content of an existing file.

        Args:
            file_id: ID of the remote file
            file_path: Local file holding the new content
            mime_type: Content type (detected from the name if not given)

        Returns:
            The updated file
        """
        mime_type = mime_type or detect_mime_type(file_path)
        media = self._media(file_path, mime_type)
        try:
            request = self._files().update(
                fileId=file_id, media_body=media, fields=FILE_FIELDS
            )
            data = self._execute(request)
        finally:
            media.stream().close()
        return DriveFile.from_api_response(data)
