"""
chunkscribe.audio - Decoding, PCM encoding, and segmentation.

Pipeline Stage 1: decode the source with a pluggable decoder, split it into
fixed-length windows, and encode each window as 16kHz mono 16-bit WAV.
"""

from __future__ import annotations
