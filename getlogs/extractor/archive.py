"""
Log file extraction from an issue's working directory.

Plain files whose name matches the log pattern are copied into the
destination. Zip archives are opened and every entry whose base name matches
the archive pattern is written into the destination under that base name,
so any directory structure inside the archive is flattened. Archives nested
inside archives are not unpacked.
"""

import re
import shutil
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from getlogs.config import Settings
from getlogs.models import ExtractionSummary
from getlogs.utils.errors import ArchiveError, FileSystemError, InvalidPatternError
from getlogs.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

ARCHIVE_SUFFIX = ".zip"

# Raised by zipfile for truncated, corrupt, encrypted or unsupported entries,
# and for entry names flagged UTF-8 that do not decode
_ARCHIVE_READ_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
    RuntimeError,
    UnicodeDecodeError,
)


def compile_pattern(pattern_name: str, pattern: str) -> re.Pattern:
    """
    Compile a configured pattern.

    Raises:
        InvalidPatternError: Naming the config field and the bad pattern text
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidPatternError(pattern_name, pattern, str(e))


def entry_base_name(entry_name: str) -> str:
    """Base name of a zip entry, ignoring the directories inside the archive."""
    return PurePosixPath(entry_name.replace("\\", "/")).name


class LogExtractor:
    """Copy matching log files out of a directory and its zip archives."""

    def __init__(self, log_pattern: str, archive_pattern: Optional[str] = None) -> None:
        """
        Initialize the extractor.

        Args:
            log_pattern: Regex searched in plain file names
            archive_pattern: Regex searched in archive entry base names,
                defaults to ``log_pattern``

        Raises:
            InvalidPatternError: If either pattern does not compile
        """
        self.log_regex = compile_pattern("logfile_regex", log_pattern)
        if archive_pattern is None:
            self.archive_regex = self.log_regex
        else:
            self.archive_regex = compile_pattern("archive_regex", archive_pattern)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LogExtractor":
        return cls(settings.logfile_regex, settings.effective_archive_regex)

    @log_performance
    def run(
        self,
        source_dir: Union[str, Path],
        dest_dir: Union[str, Path],
    ) -> ExtractionSummary:
        """
        Extract log files from ``source_dir`` into ``dest_dir``.

        Only the direct entries of ``source_dir`` are considered. The first
        unreadable archive aborts the whole pass, leaving whatever was already
        written in ``dest_dir``.

        Returns:
            Summary of the files written

        Raises:
            FileSystemError: On directory creation, read or write failure
            ArchiveError: If an archive or one of its entries cannot be read
        """
        source_dir = Path(source_dir)
        dest_dir = Path(dest_dir)

        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(dest_dir, "create directory", e.strerror or str(e))

        try:
            entries = sorted(source_dir.iterdir())
        except OSError as e:
            raise FileSystemError(source_dir, "read directory", e.strerror or str(e))

        summary = ExtractionSummary(source_dir=source_dir, dest_dir=dest_dir)

        for path in entries:
            if not path.is_file():
                continue

            if self.log_regex.search(path.name):
                self._copy_file(path, dest_dir / path.name)
                summary.copied.append(path.name)
            elif path.suffix == ARCHIVE_SUFFIX:
                summary.unpacked.extend(self._extract_archive(path, dest_dir))
                summary.archives.append(path.name)
            else:
                logger.debug(f"Skipping {path.name}")

        logger.info(f"Extraction complete to {dest_dir}")
        return summary

    def _copy_file(self, source: Path, target: Path) -> None:
        try:
            shutil.copyfile(source, target)
        except OSError as e:
            raise FileSystemError(target, f"copy {source.name} to", e.strerror or str(e))
        logger.debug(f"Copied {source.name}")

    def _extract_archive(self, archive_path: Path, dest_dir: Path) -> list[str]:
        """Write the matching entries of one archive and return their names."""
        written = []

        try:
            archive = zipfile.ZipFile(archive_path)
        except OSError as e:
            raise FileSystemError(archive_path, "open", e.strerror or str(e))
        except _ARCHIVE_READ_ERRORS as e:
            raise ArchiveError(archive_path, str(e))

        with archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue

                name = entry_base_name(info.filename)
                if not name or not self.archive_regex.search(name):
                    continue

                target = dest_dir / name
                try:
                    with archive.open(info) as src, open(target, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                except _ARCHIVE_READ_ERRORS as e:
                    raise ArchiveError(archive_path, f"entry '{info.filename}': {e}")
                except OSError as e:
                    raise FileSystemError(target, "write", e.strerror or str(e))

                written.append(name)

        logger.debug(f"Unpacked {len(written)} entries from {archive_path.name}")
        return written


def extract_logs(
    source_dir: Union[str, Path],
    dest_dir: Union[str, Path],
    log_pattern: str,
    archive_pattern: Optional[str] = None,
) -> ExtractionSummary:
    """Extract log files from ``source_dir`` into ``dest_dir``."""
    return LogExtractor(log_pattern, archive_pattern).run(source_dir, dest_dir)
