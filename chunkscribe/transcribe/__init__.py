"""
chunkscribe.transcribe - Streaming transcription client.

Pipeline Stage 2: upload each segment to the transcription endpoint and
decode the newline-delimited JSON events it streams back.
"""

from __future__ import annotations
