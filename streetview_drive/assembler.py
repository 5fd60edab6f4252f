"""Ordered frame hand-off to the ffmpeg video encoder."""
from __future__ import annotations

import os
import subprocess
import tempfile
from typing import IO, Protocol

from .constants import FFMPEG_BIN, FRAME_RATE, PIXEL_FORMAT, VIDEO_CODEC
from .io_utils import frame_index_from_name


class EncoderError(RuntimeError):
    """Raised when the video encoder cannot produce the output file."""


class FrameEncoder(Protocol):
    def open(self) -> None: ...

    def write_frame(self, data: bytes) -> None: ...

    def close(self) -> None: ...

    def abort(self) -> None: ...


class FfmpegEncoder:
    """Feed JPEG frames to ffmpeg over stdin (image2pipe) and encode H.264."""

    def __init__(self, output_path: str, fps: int = FRAME_RATE, ffmpeg_bin: str = FFMPEG_BIN):
        self.output_path = output_path
        self.fps = fps
        self.ffmpeg_bin = ffmpeg_bin
        self.process: subprocess.Popen | None = None
        self.error_log: IO[bytes] | None = None

    def build_command(self) -> list[str]:
        return [
            self.ffmpeg_bin,
            "-y",
            "-loglevel",
            "error",
            "-f",
            "image2pipe",
            "-framerate",
            str(self.fps),
            "-i",
            "-",
            "-c:v",
            VIDEO_CODEC,
            "-pix_fmt",
            PIXEL_FORMAT,
            self.output_path,
        ]

    def open(self) -> None:
        # ffmpeg must not block on a full stderr pipe while frames stream in.
        self.error_log = tempfile.TemporaryFile()
        try:
            self.process = subprocess.Popen(
                self.build_command(),
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=self.error_log,
            )
        except OSError as exc:
            self.close_error_log()
            raise EncoderError(f"Could not start {self.ffmpeg_bin}: {exc}") from exc

    def write_frame(self, data: bytes) -> None:
        if self.process is None or self.process.stdin is None:
            raise EncoderError("Encoder is not open.")
        try:
            self.process.stdin.write(data)
            self.process.stdin.flush()
        except OSError as exc:
            raise EncoderError(f"Encoder stopped accepting frames: {exc}{self.drain_errors()}") from exc

    def close(self) -> None:
        if self.process is None:
            raise EncoderError("Encoder is not open.")
        try:
            self.process.communicate()
        except OSError as exc:
            raise EncoderError(f"Encoder failed while finishing: {exc}") from exc
        detail = self.read_error_log()
        self.close_error_log()
        if self.process.returncode != 0:
            raise EncoderError(f"{self.ffmpeg_bin} exited with status {self.process.returncode}. {detail}".strip())

    def abort(self) -> None:
        if self.process is not None and self.process.poll() is None:
            self.process.kill()
            self.process.wait()
        self.close_error_log()

    def read_error_log(self) -> str:
        if self.error_log is None or self.error_log.closed:
            return ""
        self.error_log.seek(0)
        return self.error_log.read().decode(errors="ignore").strip()

    def close_error_log(self) -> None:
        if self.error_log is not None:
            self.error_log.close()

    def drain_errors(self) -> str:
        """Collect whatever ffmpeg reported after it died."""
        if self.process is None:
            return ""
        if self.process.poll() is None:
            self.process.kill()
            self.process.wait()
        detail = self.read_error_log()
        return f" ({detail})" if detail else ""


def collect_frame_paths(frames_dir: str) -> list[str]:
    """Return frame paths sorted by the sequence index in their names."""
    indexed: list[tuple[int, str]] = []
    for name in os.listdir(frames_dir):
        sequence_index = frame_index_from_name(name)
        if sequence_index is None:
            continue
        indexed.append((sequence_index, os.path.join(frames_dir, name)))
    indexed.sort()
    return [path for _, path in indexed]


def remove_file(path: str) -> None:
    if os.path.isfile(path):
        os.remove(path)


def assemble_video(frames_dir: str, output_path: str, encoder: FrameEncoder) -> int:
    """Stream the frames to the encoder in sequence order; return the frame count."""
    remove_file(output_path)
    frame_paths = collect_frame_paths(frames_dir)
    if not frame_paths:
        raise EncoderError(f"No frames to encode in {frames_dir}.")
    print(f"Encoding {len(frame_paths)} frame(s) into {output_path}...")
    encoder.open()
    try:
        for path in frame_paths:
            with open(path, "rb") as handle:
                encoder.write_frame(handle.read())
        encoder.close()
        if not os.path.isfile(output_path):
            raise EncoderError(f"Encoder finished without writing {output_path}.")
    except (EncoderError, OSError) as exc:
        encoder.abort()
        remove_file(output_path)
        if isinstance(exc, EncoderError):
            raise
        raise EncoderError(f"Could not read frame for encoding: {exc}") from exc
    return len(frame_paths)
