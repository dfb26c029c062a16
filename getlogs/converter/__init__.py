from getlogs.converter.dlt import LogConverter

__all__ = ["LogConverter"]
