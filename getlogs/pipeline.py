"""
Per-issue pipeline and batch runner.

This module wires the fetch, extract and convert steps together for one
issue and runs a list of issues sequentially under a batch policy.
"""

from typing import Iterable, Optional

from rich.console import Console

from getlogs.config import Settings
from getlogs.converter import LogConverter
from getlogs.extractor import LogExtractor
from getlogs.models import BatchPolicy, BatchReport, IssueResult, ProcessingStatus, Step
from getlogs.tracker import AttachmentFetcher, create_tracker_client
from getlogs.utils.errors import FileSystemError, GetlogsException
from getlogs.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

EXTRACTED_DIR_NAME = "logs-extracted"


class IssuePipeline:
    """
    Runs the selected steps for a single issue.

    The working directory of an issue is ``<default_path>/<issue_id>``;
    extracted logs go to its ``logs-extracted`` subdirectory.
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: Optional[AttachmentFetcher] = None,
        extractor: Optional[LogExtractor] = None,
        converter: Optional[LogConverter] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.settings = settings
        self.console = console or Console()
        self._fetcher = fetcher
        self._extractor = extractor
        self.converter = converter or LogConverter()

    @property
    def fetcher(self) -> AttachmentFetcher:
        # Built on first use so extract-only runs need no credentials
        if self._fetcher is None:
            self._fetcher = AttachmentFetcher(
                create_tracker_client(self.settings), console=self.console
            )
        return self._fetcher

    @property
    def extractor(self) -> LogExtractor:
        if self._extractor is None:
            self._extractor = LogExtractor.from_settings(self.settings)
        return self._extractor

    def run(self, issue_id: str, step: Step) -> IssueResult:
        """
        Run ``step`` for one issue.

        Raises:
            GetlogsException: On the first failing step
        """
        result = IssueResult(issue_id=issue_id)
        base_path = self.settings.issue_dir(issue_id)
        extract_path = base_path / EXTRACTED_DIR_NAME

        with LogContext(issue_id=issue_id):
            try:
                base_path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FileSystemError(base_path, "create directory", e.strerror or str(e))

            self.console.print(f"=== {issue_id} ===")

            if step.includes(Step.FETCH):
                result.downloaded = self.fetcher.fetch(issue_id, base_path)

            if step.includes(Step.EXTRACT):
                result.extraction = self.extractor.run(base_path, extract_path)

            if step.includes(Step.CONVERT):
                result.pending_conversion = self.converter.run(extract_path)

        result.status = ProcessingStatus.COMPLETED
        return result


class BatchRunner:
    """Runs a pipeline over several issues, one after another."""

    def __init__(self, pipeline: IssuePipeline, policy: BatchPolicy = BatchPolicy.ABORT) -> None:
        self.pipeline = pipeline
        self.policy = policy

    def run(self, issue_ids: Iterable[str], step: Step) -> BatchReport:
        """
        Process every issue with ``step``.

        Under ``BatchPolicy.ABORT`` the first failure is re-raised and the
        remaining issues are not processed. Under ``BatchPolicy.CONTINUE``
        failures are recorded in the report and the batch carries on.
        """
        report = BatchReport(step=step, policy=self.policy)

        for issue_id in issue_ids:
            try:
                result = self.pipeline.run(issue_id, step)
            except GetlogsException as e:
                if self.policy is BatchPolicy.ABORT:
                    raise
                logger.error(f"{issue_id} failed: {e}")
                result = IssueResult(
                    issue_id=issue_id, status=ProcessingStatus.FAILED, error=str(e)
                )
            report.results.append(result)

        logger.debug(
            f"Batch finished: {len(report.succeeded)} succeeded, {len(report.failed)} failed"
        )
        return report


def create_batch_runner(
    settings: Settings,
    policy: Optional[BatchPolicy] = None,
    console: Optional[Console] = None,
) -> BatchRunner:
    """Create a batch runner from settings."""
    pipeline = IssuePipeline(settings, console=console)
    return BatchRunner(pipeline, policy or settings.batch_policy)
