"""
DLT to logcat conversion step.

The conversion itself is not implemented yet. The step only reports which
extracted files would be converted.
"""

from pathlib import Path
from typing import List, Union

from getlogs.utils.errors import FileSystemError
from getlogs.utils.logging import get_logger

logger = get_logger(__name__)

DLT_SUFFIX = ".dlt"


class LogConverter:
    """Find DLT traces that would be converted to logcat."""

    def run(self, directory: Union[str, Path]) -> List[Path]:
        """
        List the DLT files directly inside ``directory``.

        Raises:
            FileSystemError: If the directory cannot be read
        """
        directory = Path(directory)
        try:
            candidates = sorted(
                p for p in directory.iterdir() if p.is_file() and p.suffix == DLT_SUFFIX
            )
        except OSError as e:
            raise FileSystemError(directory, "read directory", e.strerror or str(e))

        # TODO: pull the logcat payload out of DLT messages once the message
        # layout to decode has been settled.
        for path in candidates:
            logger.warning(f"Conversion of {path.name} is not implemented, skipping")

        return candidates
