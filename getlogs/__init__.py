"""getlogs - fetch issue attachments and extract log files from them."""

__version__ = "1.0.0"
