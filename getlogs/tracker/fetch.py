"""
Attachment download step.

Downloads every attachment of an issue into its working directory, one after
another, with a rich progress bar per file.
"""

from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from getlogs.tracker.client import JiraClient
from getlogs.utils.errors import FileSystemError
from getlogs.utils.logging import LogContext, get_logger, log_performance

logger = get_logger(__name__)


class AttachmentFetcher:
    """Fetch all attachments of an issue."""

    def __init__(self, client: JiraClient, console: Optional[Console] = None) -> None:
        self.client = client
        self.console = console or Console()

    def _progress(self) -> Progress:
        return Progress(
            SpinnerColumn(style="green"),
            TimeElapsedColumn(),
            BarColumn(bar_width=40, complete_style="cyan", finished_style="blue"),
            DownloadColumn(),
            TimeRemainingColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
            transient=True,
        )

    @log_performance
    def fetch(self, issue_id: str, dest_dir: Path) -> List[Path]:
        """
        Download the attachments of ``issue_id`` into ``dest_dir``.

        Returns:
            Paths of the downloaded files

        Raises:
            TrackerError: If the issue cannot be listed or a download fails
            FileSystemError: If a file cannot be written
        """
        dest_dir = Path(dest_dir)
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(dest_dir, "create directory", e.strerror or str(e))

        downloaded = []
        with LogContext(issue_id=issue_id):
            attachments = self.client.get_attachments(issue_id)

            for attachment in attachments:
                with self._progress() as progress:
                    task = progress.add_task(
                        attachment.safe_filename, total=attachment.size or None
                    )

                    def advance(n: int, total: Optional[int]) -> None:
                        progress.update(task, advance=n, total=total)

                    path = self.client.download_attachment(
                        attachment, dest_dir, progress_callback=advance
                    )

                downloaded.append(path)
                self.console.print(f"Downloaded {attachment.safe_filename}")

        return downloaded
