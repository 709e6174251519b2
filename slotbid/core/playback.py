"""
Playback helpers for a winner's viewing window.

A player showing a multi-winner artifact keeps the position inside the
viewer's segment: seeking before it jumps to its start, reaching its end
loops back to its start.
"""

from typing import Optional

from slotbid.core.auction.allocator import Segment


def clamp_position(segment: Optional[Segment], position: float) -> float:
    """
    Map a requested playback position into the viewer's segment.

    Args:
        segment: Viewer's window, or None for whole-artifact access
        position: Requested position in seconds

    Returns:
        Position the player should use
    """
    if segment is None:
        return max(0.0, position)
    if position < segment.start or position >= segment.end:
        return float(segment.start)
    return position


def format_duration(seconds: int) -> str:
    """Render seconds as m:ss (minutes are not wrapped into hours)."""
    seconds = max(0, int(seconds))
    minutes, rest = divmod(seconds, 60)
    return f"{minutes}:{rest:02d}"
