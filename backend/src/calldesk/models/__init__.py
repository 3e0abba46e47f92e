"""Data models for calldesk."""

from .clients import ClientRecord, SearchRequest
from .tables import areas, campaigns, client_campaigns, clients, metadata

__all__ = [
    "ClientRecord",
    "SearchRequest",
    "areas",
    "campaigns",
    "client_campaigns",
    "clients",
    "metadata",
]
