"""
Chunkscribe - segmented streaming transcription client.

Splits long recordings into fixed-length segments and streams each one to a
transcription endpoint through a four-stage pipeline: audio decoding →
segmentation and PCM encoding → streaming event ingestion → timeline
reassembly.
"""

__version__ = "0.1.0"
