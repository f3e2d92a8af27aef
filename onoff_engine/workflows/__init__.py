"""
Workflows Package for the OnOff Engine.

This package provides the event dispatcher and the access reconciler
that turn lifecycle events into GitHub team membership changes.
"""

from .dispatcher import EventDispatcher, build_dispatcher
from .helpers import classify_event, direction_for, format_notification
from .reconciler import AccessReconciler

__all__ = [
    "AccessReconciler",
    "EventDispatcher",
    "build_dispatcher",
    "classify_event",
    "direction_for",
    "format_notification",
]
