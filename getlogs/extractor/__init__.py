"""
Log extraction from issue working directories and the zip archives in them.
"""

from getlogs.extractor.archive import LogExtractor, compile_pattern, extract_logs

__all__ = [
    "LogExtractor",
    "compile_pattern",
    "extract_logs",
]
