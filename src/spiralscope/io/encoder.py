"""
ffmpeg video output.

Frames from the scene are written as raw rgb24 bytes to an ffmpeg process
over stdin; an audio file can be muxed in alongside.
"""

import shutil
import subprocess
from pathlib import Path
from typing import Iterable

import numpy as np
import pygame

from spiralscope.io.exporter import surface_to_array


# Quality presets: (preset, crf, pix_fmt)
QUALITY_PRESETS = {
    "high": ("slow", "18", "yuv444p"),
    "medium": ("medium", "23", "yuv420p"),
    "fast": ("ultrafast", "28", "yuv420p"),
}


class EncoderError(RuntimeError):
    """ffmpeg is missing or exited with an error."""


def ffmpeg_available() -> bool:
    return shutil.which("ffmpeg") is not None


def build_command(
    output_path: Path,
    width: int,
    height: int,
    fps: int,
    quality: str = "high",
    audio_path: Path | None = None,
    duration: float | None = None,
) -> list[str]:
    """Assemble the ffmpeg argument list; unknown qualities use ``high``."""
    preset, crf, pix_fmt = QUALITY_PRESETS.get(quality, QUALITY_PRESETS["high"])

    inputs = ["-f", "rawvideo", "-pix_fmt", "rgb24", "-s", f"{width}x{height}", "-r", str(fps), "-i", "pipe:0"]
    video = ["-c:v", "libx264", "-preset", preset, "-crf", crf, "-pix_fmt", pix_fmt]
    audio = []
    if audio_path is not None:
        inputs += ["-i", str(audio_path)]
        # stop at whichever of video or audio ends first
        audio = ["-c:a", "aac", "-b:a", "192k", "-shortest"]
    limit = ["-t", str(duration)] if duration is not None else []

    return ["ffmpeg", "-y", "-loglevel", "error", "-nostats", *inputs, *video, *audio, *limit, str(output_path)]


def _summarize_stderr(stderr: str) -> str:
    error_lines = [
        line for line in stderr.splitlines()
        if "error" in line.lower() or "invalid" in line.lower()
    ]
    return "\n".join(error_lines[-5:]) if error_lines else stderr[-500:]


class FrameSink:
    """
    Open ffmpeg process accepting frames of a fixed size.

    Use as a context manager; leaving the block closes stdin, waits for
    ffmpeg and raises :class:`EncoderError` on a non-zero exit.
    """

    def __init__(self, output_path: Path, width: int, height: int, fps: int, **options):
        self.output_path = Path(output_path)
        self.shape = (height, width, 3)
        self.command = build_command(self.output_path, width, height, fps, **options)
        self.frames_written = 0
        self._proc: subprocess.Popen | None = None

    def __enter__(self) -> "FrameSink":
        if not ffmpeg_available():
            raise EncoderError("ffmpeg was not found on PATH")
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._proc = subprocess.Popen(
            self.command,
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
        return self

    def write(self, frame) -> bool:
        """
        Send one frame, given as a pygame Surface or an (H, W, 3) uint8 array.

        Returns:
            False once ffmpeg has stopped reading; the exit status is
            reported when the sink closes.
        """
        if isinstance(frame, pygame.Surface):
            frame = surface_to_array(frame)
        if frame.shape != self.shape:
            raise ValueError(f"Frame shape {frame.shape} does not match {self.shape}")
        try:
            self._proc.stdin.write(np.ascontiguousarray(frame, dtype=np.uint8).tobytes())
        except BrokenPipeError:
            return False
        self.frames_written += 1
        return True

    def close(self):
        proc, self._proc = self._proc, None
        if proc is None:
            return
        try:
            proc.stdin.close()
        except BrokenPipeError:
            pass
        stderr = proc.stderr.read().decode("utf-8", errors="replace")
        proc.wait()
        if proc.returncode != 0:
            raise EncoderError(f"ffmpeg exited with code {proc.returncode}: {_summarize_stderr(stderr)}")

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
        elif self._proc is not None:
            self._proc.kill()
            self._proc.wait()
            self._proc = None
        return False


def encode_video(
    frame_iterator: Iterable,
    output_path: Path,
    width: int = 1200,
    height: int = 1200,
    fps: int = 60,
    quality: str = "high",
    audio_path: Path | None = None,
    duration: float | None = None,
    total_frames: int | None = None,
    progress_callback: callable = None,
) -> Path:
    """
    Encode a frame stream to MP4.

    Args:
        frame_iterator: Yields Surfaces or (H, W, 3) uint8 arrays.
        output_path: Output MP4 path.
        width: Frame width.
        height: Frame height.
        fps: Frames per second.
        quality: "high", "medium", or "fast".
        audio_path: Optional audio file to mux in.
        duration: Output duration limit in seconds.
        total_frames: Total frame count for progress reporting.
        progress_callback: Optional callback(current_frame, total_frames).

    Returns:
        Path to the output file.

    Raises:
        EncoderError: If ffmpeg is missing or fails.
    """
    sink = FrameSink(
        output_path, width, height, fps,
        quality=quality, audio_path=audio_path, duration=duration,
    )
    with sink:
        for frame in frame_iterator:
            if not sink.write(frame):
                break
            if progress_callback and total_frames:
                progress_callback(sink.frames_written, total_frames)
    return sink.output_path
