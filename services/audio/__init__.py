"""
Audio Services Module

Voice note handling:
  - Transcoding to mono 16 kHz MP3 (ffmpeg)
  - Download → transcode → transcribe pipeline
"""

from .transcoder import FFmpegTranscoder, TranscodeError
from .pipeline import AudioPipeline

__all__ = [
    "FFmpegTranscoder",
    "TranscodeError",
    "AudioPipeline",
]
