"""
Audio Transcoder

Converts an arbitrary compressed voice note (OGG/Opus, AAC, AMR, ...) into
mono 16 kHz MP3 using the ffmpeg binary. Input is streamed through stdin,
output lands in a uniquely named file under the temp directory.
"""

import logging
import os
import subprocess
import time
from pathlib import Path
from typing import Optional, Union
from uuid import uuid4

logger = logging.getLogger(__name__)


class TranscodeError(Exception):
    """ffmpeg could not produce the normalized file."""
    pass


class FFmpegTranscoder:
    """Normalizes audio bytes to mono 16 kHz MP3."""

    TARGET_SAMPLE_RATE = 16000
    TARGET_CHANNELS = 1
    TARGET_FORMAT = "mp3"

    def __init__(
        self,
        temp_dir: Union[str, Path] = "temp",
        ffmpeg_bin: str = "ffmpeg",
        timeout_s: Optional[int] = None,
    ):
        self.temp_dir = Path(temp_dir)
        self.ffmpeg_bin = ffmpeg_bin
        self.timeout_s = timeout_s

    def output_path(self) -> Path:
        """
        Fresh output path.

        Nanosecond timestamp plus a random suffix: concurrent transcodes
        never share a file, and no lock is needed.
        """
        return self.temp_dir / f"{time.time_ns()}-{uuid4().hex[:8]}.{self.TARGET_FORMAT}"

    def transcode(self, audio_data: bytes) -> Path:
        """
        Transcode in-memory audio to a normalized file.

        Returns:
            Path of the new file. The caller owns it and must delete it.

        Raises:
            TranscodeError: Empty input, ffmpeg missing, or ffmpeg failed
        """
        if not audio_data:
            raise TranscodeError("Audio data is empty")

        self.temp_dir.mkdir(parents=True, exist_ok=True)
        out_path = self.output_path()

        cmd = [
            self.ffmpeg_bin,
            "-hide_banner", "-loglevel", "error",
            "-y",
            "-i", "pipe:0",
            "-ac", str(self.TARGET_CHANNELS),
            "-ar", str(self.TARGET_SAMPLE_RATE),
            "-f", self.TARGET_FORMAT,
            str(out_path),
        ]

        try:
            subprocess.run(
                cmd,
                input=audio_data,
                check=True,
                capture_output=True,
                timeout=self.timeout_s,
            )
        except FileNotFoundError:
            raise TranscodeError(f"ffmpeg binary not found: {self.ffmpeg_bin}")
        except subprocess.CalledProcessError as e:
            _remove_quietly(out_path)
            stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
            raise TranscodeError(f"ffmpeg exited with {e.returncode}: {stderr[:500]}")
        except subprocess.TimeoutExpired:
            _remove_quietly(out_path)
            raise TranscodeError("ffmpeg timed out")

        if not out_path.exists():
            raise TranscodeError("ffmpeg produced no output file")

        logger.debug(
            f"Transcoded {len(audio_data)} bytes to {out_path.name}",
            extra={"output": str(out_path), "input_bytes": len(audio_data)},
        )
        return out_path


def _remove_quietly(path: Path) -> None:
    if path.exists():
        os.unlink(path)
