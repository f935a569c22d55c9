"""
In-process change notification for pet addresses.
"""

from .bus import ChangeBus, Subscription

__all__ = [
    "ChangeBus",
    "Subscription",
]
