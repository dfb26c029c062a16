"""
Issue tracker access: listing and downloading issue attachments.
"""

from getlogs.tracker.client import JiraClient, create_tracker_client
from getlogs.tracker.fetch import AttachmentFetcher

__all__ = [
    "AttachmentFetcher",
    "JiraClient",
    "create_tracker_client",
]
