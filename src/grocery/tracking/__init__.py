"""Tracking hub registry.

One hub per process. The in-memory hub is the only implementation; a
broker-backed hub would be needed to fan out across several API workers.
"""

from grocery.tracking.memory_hub import InMemoryTrackingHub

_hub: InMemoryTrackingHub | None = None


def get_hub() -> InMemoryTrackingHub:
    global _hub
    if _hub is None:
        _hub = InMemoryTrackingHub()
    return _hub


def reset_hub():
    """Drop all subscribers and recent messages (useful for testing)."""
    if _hub is not None:
        _hub.reset()
