"""
chunkscribe.export - Transcript export.

Writes the final fragment list of a run as a document:
- txt: one plain-text paragraph per fragment, no timestamps
- html: one <p> per fragment, no timestamps (Jinja2 template)
- json: fragments with global timestamps plus run metadata
- srt: numbered subtitle cues
"""

from __future__ import annotations

from chunkscribe.export.writer import EXPORT_FORMATS, export_transcript, load_transcript

__all__ = ["EXPORT_FORMATS", "export_transcript", "load_transcript"]
