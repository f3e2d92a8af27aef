"""
Event Ingestion Package.

Parses identity provider webhook batches into LifecycleEvent objects.
"""

from .event_parser import parse_event_batch

__all__ = [
    "parse_event_batch",
]
