"""
Jira REST client for attachment operations.

This module provides a small synchronous interface to the tracker: listing
the attachments of an issue and streaming one of them to disk.
"""

from pathlib import Path
from typing import Callable, List, Optional

import requests
from pydantic import ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from getlogs.config import Settings
from getlogs.models import Attachment
from getlogs.utils.errors import (
    AttachmentDownloadError,
    FileSystemError,
    IssueNotFoundError,
    TrackerAuthenticationError,
    TrackerConnectionError,
    TrackerError,
    TrackerRateLimitError,
)
from getlogs.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

ISSUE_ENDPOINT = "{base}/rest/api/2/issue/{issue_id}?fields=attachment"
CHUNK_SIZE = 64 * 1024

ProgressCallback = Callable[[int, Optional[int]], None]


class _ServerError(TrackerError):
    """5xx response, worth retrying."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"Tracker returned HTTP {status_code} for {url}", {"status": status_code})
        self.status_code = status_code


class JiraClient:
    """Client for Jira issue and attachment operations."""

    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
        max_attempts: int = 3,
        backoff: float = 1.0,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Tracker URL, proxy and credentials
            session: HTTP session to use (a new one by default)
            max_attempts: Attempts per request on connection errors and 5xx
            backoff: Multiplier for the exponential wait between attempts

        Raises:
            TrackerAuthenticationError: If no credentials are configured
        """
        self.settings = settings
        self.base_url = settings.jira_url
        self.timeout = settings.request_timeout
        self.session = session or requests.Session()

        if settings.proxy:
            self.session.proxies.update({"http": settings.proxy, "https": settings.proxy})

        self._authenticate()

        self._retrying = Retrying(
            retry=retry_if_exception_type(
                (requests.ConnectionError, requests.Timeout, _ServerError)
            ),
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=backoff, max=10),
            reraise=True,
        )

    def _authenticate(self) -> None:
        mode = self.settings.auth_mode
        if mode == "bearer":
            self.session.headers.update(
                {"Authorization": f"Bearer {self.settings.bearer_token}"}
            )
        elif mode == "basic":
            self.session.auth = (self.settings.user_email, self.settings.api_token)
        else:
            raise TrackerAuthenticationError(
                "No authentication configured: set either bearer_token or "
                "user_email+api_token in config"
            )
        logger.debug(f"Using {mode} authentication for {self.base_url}")

    def _get(self, url: str, stream: bool = False) -> requests.Response:
        """GET with retries, mapping failures to tracker exceptions."""
        try:
            return self._retrying(self._send, url, stream)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise TrackerConnectionError(f"Cannot reach tracker at {url}: {e}")

    def _send(self, url: str, stream: bool) -> requests.Response:
        response = self.session.get(url, stream=stream, timeout=self.timeout)
        status = response.status_code

        if status < 400:
            return response

        response.close()
        if status in (401, 403):
            raise TrackerAuthenticationError(
                f"Tracker rejected credentials (HTTP {status})", {"url": url}
            )
        if status == 429:
            retry_after = response.headers.get("Retry-After")
            raise TrackerRateLimitError(
                int(retry_after) if retry_after and retry_after.isdigit() else None
            )
        if status >= 500:
            logger.warning(f"Tracker returned HTTP {status} for {url}")
            raise _ServerError(status, url)
        raise TrackerError(f"Tracker returned HTTP {status} for {url}", {"status": status})

    @log_performance
    def get_attachments(self, issue_id: str) -> List[Attachment]:
        """
        List the attachments of an issue.

        Raises:
            IssueNotFoundError: If the issue does not exist
            TrackerError: For other tracker failures or a malformed response
        """
        url = ISSUE_ENDPOINT.format(base=self.base_url, issue_id=issue_id)

        try:
            response = self._get(url)
        except TrackerError as e:
            if e.details.get("status") == 404:
                raise IssueNotFoundError(issue_id)
            raise

        try:
            data = response.json()
        except ValueError as e:
            raise TrackerError(f"Tracker returned invalid JSON for {issue_id}: {e}")

        try:
            attachments = Attachment.from_issue_json(data)
        except (ValidationError, AttributeError, TypeError) as e:
            raise TrackerError(
                f"Tracker returned malformed attachment data for {issue_id}: {e}"
            )

        logger.info(f"Found {len(attachments)} attachments on {issue_id}")
        return attachments

    def download_attachment(
        self,
        attachment: Attachment,
        dest_dir: Path,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Path:
        """
        Stream an attachment to ``dest_dir``.

        Args:
            attachment: Attachment to download
            dest_dir: Directory to write into
            progress_callback: Called with (bytes in chunk, expected total)

        Returns:
            Path of the written file

        Raises:
            AttachmentDownloadError: If the transfer breaks off
            FileSystemError: If the file cannot be written
        """
        out_path = Path(dest_dir) / attachment.safe_filename
        response = self._get(attachment.content_url, stream=True)

        total = response.headers.get("Content-Length")
        total = int(total) if total and total.isdigit() else (attachment.size or None)

        try:
            with response, open(out_path, "wb") as fh:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    fh.write(chunk)
                    if progress_callback:
                        progress_callback(len(chunk), total)
        except requests.RequestException as e:
            raise AttachmentDownloadError(attachment.filename, str(e))
        except OSError as e:
            raise FileSystemError(out_path, "write", e.strerror or str(e))

        logger.debug(f"Downloaded {attachment.filename} to {out_path}")
        return out_path


def create_tracker_client(settings: Settings) -> JiraClient:
    """Create a tracker client from settings."""
    return JiraClient(settings)
