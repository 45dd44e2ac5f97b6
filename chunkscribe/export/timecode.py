"""
chunkscribe.export.timecode - Subtitle timestamp formatting.
"""

from __future__ import annotations


def seconds_to_srt_timestamp(seconds: float) -> str:
    """Convert float seconds to an SRT timestamp.

    Args:
        seconds: Time in seconds (negative values clamp to zero)

    Returns:
        Timestamp string in HH:MM:SS,mmm format
    """
    total_ms = max(0, round(seconds * 1000))

    ms = total_ms % 1000
    total_seconds = total_ms // 1000
    ss = total_seconds % 60
    mm = (total_seconds // 60) % 60
    hh = total_seconds // 3600

    return f"{hh:02d}:{mm:02d}:{ss:02d},{ms:03d}"
