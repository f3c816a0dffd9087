"""Video encoders: append-only frame sinks that produce a video file."""

import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image
from moviepy import ImageSequenceClip
from moviepy.video.io.ffmpeg_writer import FFMPEG_VideoWriter

from ..errors import EncodeError

logger = logging.getLogger(__name__)


def even_size(width: int, height: int) -> Tuple[int, int]:
    """Round dimensions down to even values, as H.264 with yuv420p requires."""
    return max(2, width - width % 2), max(2, height - height % 2)


def partial_path(output_path: Path) -> Path:
    """Path an encoder writes to before the output is complete."""
    return output_path.with_name(f"{output_path.stem}.partial{output_path.suffix}")


def export(
    video: ImageSequenceClip,
    output_path: Path,
    fps: int = 24,
    codec: str = "libx264",
    bitrate: Optional[str] = None,
    preset: str = "medium"
) -> Path:
    """Write a clip to file with proper encoding.

    Args:
        video: Clip to write.
        output_path: Path for output file.
        fps: Frames per second.
        codec: Video codec (default libx264).
        bitrate: Video bitrate (e.g., "5000k"). None for auto.
        preset: Encoding preset (ultrafast, fast, medium, slow, slower).

    Returns:
        Path to the written video file.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    export_params = {
        "fps": fps,
        "codec": codec,
        "preset": preset,
        "audio": False,
        "logger": None,
    }

    if bitrate:
        export_params["bitrate"] = bitrate

    video.write_videofile(str(output_path), **export_params)

    return output_path


class VideoEncoder(ABC):
    """Append-only frame sink.

    Frames must arrive in strictly increasing index order and all share the
    size of the first frame (rounded down to even dimensions). ``finalize``
    produces the output file; ``discard`` drops everything written so far and
    never leaves a partial file behind.
    """

    def __init__(
        self,
        codec: str = "libx264",
        preset: str = "medium",
        bitrate: Optional[str] = None,
    ) -> None:
        self._codec = codec
        self._preset = preset
        self._bitrate = bitrate
        self._output_path: Optional[Path] = None
        self._fps = 0
        self._size: Optional[Tuple[int, int]] = None
        self._frames_written = 0

    @property
    def frames_written(self) -> int:
        return self._frames_written

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        return self._size

    def open(self, output_path: Path, fps: int) -> None:
        """Start a new video at ``output_path``."""
        if self._output_path is not None:
            raise EncodeError("Encoder is already open")
        if fps <= 0:
            raise EncodeError(f"Invalid frame rate: {fps}")
        self._output_path = Path(output_path)
        self._fps = fps
        self._size = None
        self._frames_written = 0
        self._output_path.parent.mkdir(parents=True, exist_ok=True)
        self._open()
        logger.debug(f"{type(self).__name__} opened {self._output_path} at {fps} fps")

    def append_frame(self, frame: Image.Image, index: Optional[int] = None) -> None:
        """Append the next frame.

        Args:
            frame: Frame image.
            index: Expected position of the frame. Out-of-order frames are rejected.

        Raises:
            EncodeError: If the encoder is not open, the frame is out of order,
                has a different size, or cannot be written.
        """
        if self._output_path is None:
            raise EncodeError("Encoder is not open")
        if index is not None and index != self._frames_written:
            raise EncodeError(f"Frame {index} out of order, expected {self._frames_written}")

        if self._size is None:
            self._size = even_size(*frame.size)
        if frame.size != self._size:
            if even_size(*frame.size) != self._size:
                raise EncodeError(f"Frame size {frame.size} does not match {self._size}")
            frame = frame.crop((0, 0, *self._size))

        try:
            self._write(frame.convert("RGB"), self._frames_written)
        except EncodeError:
            raise
        except (OSError, ValueError) as e:
            raise EncodeError(f"Failed to write frame {self._frames_written}: {e}") from e
        self._frames_written += 1

    def finalize(self) -> Path:
        """Flush all frames into the output file and return its path."""
        if self._output_path is None:
            raise EncodeError("Encoder is not open")
        if self._frames_written == 0:
            raise EncodeError("No frames to encode")

        output_path = self._output_path
        try:
            self._finalize(output_path)
        except EncodeError:
            self.discard()
            raise
        except (OSError, ValueError, RuntimeError) as e:
            self.discard()
            raise EncodeError(f"Failed to finalize {output_path}: {e}") from e

        self._cleanup()
        self._output_path = None
        logger.info(f"Encoded {self._frames_written} frames to {output_path}")
        return output_path

    def discard(self) -> None:
        """Drop all partial state. Safe to call more than once."""
        if self._output_path is None:
            return
        self._abort()
        partial = partial_path(self._output_path)
        partial.unlink(missing_ok=True)
        self._cleanup()
        logger.debug(f"Discarded partial output for {self._output_path}")
        self._output_path = None

    def _open(self) -> None:
        """Hook for backend setup."""

    @abstractmethod
    def _write(self, frame: Image.Image, index: int) -> None:
        ...

    @abstractmethod
    def _finalize(self, output_path: Path) -> None:
        ...

    def _abort(self) -> None:
        """Hook for releasing backend resources on discard."""

    def _cleanup(self) -> None:
        """Hook for removing temporary files."""


class FrameDumpEncoder(VideoEncoder):
    """Dumps frames as PNG files, then encodes the sequence in one pass.

    Encoding happens only in ``finalize``, so the frame count and frame rate
    fully determine the duration of the result.
    """

    def __init__(self, work_dir: Optional[Path] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._work_dir = work_dir
        self._frames_dir: Optional[Path] = None
        self._frame_paths: List[Path] = []

    @property
    def frames_dir(self) -> Optional[Path]:
        return self._frames_dir

    def _open(self) -> None:
        if self._work_dir is not None:
            self._work_dir.mkdir(parents=True, exist_ok=True)
        self._frames_dir = Path(tempfile.mkdtemp(prefix="lumina-frames-", dir=self._work_dir))
        self._frame_paths = []

    def _write(self, frame: Image.Image, index: int) -> None:
        path = self._frames_dir / f"frame_{index:06d}.png"
        frame.save(path)
        self._frame_paths.append(path)

    def _finalize(self, output_path: Path) -> None:
        partial = partial_path(output_path)
        clip = ImageSequenceClip([str(p) for p in self._frame_paths], fps=self._fps)
        try:
            export(
                clip,
                partial,
                fps=self._fps,
                codec=self._codec,
                bitrate=self._bitrate,
                preset=self._preset,
            )
        finally:
            clip.close()
        partial.replace(output_path)

    def _cleanup(self) -> None:
        if self._frames_dir is not None:
            shutil.rmtree(self._frames_dir, ignore_errors=True)
            self._frames_dir = None
        self._frame_paths = []


class StreamEncoder(VideoEncoder):
    """Pipes frames straight into an ffmpeg process as they arrive."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._writer: Optional[FFMPEG_VideoWriter] = None

    def _write(self, frame: Image.Image, index: int) -> None:
        if self._writer is None:
            self._writer = FFMPEG_VideoWriter(
                str(partial_path(self._output_path)),
                self._size,
                self._fps,
                codec=self._codec,
                preset=self._preset,
                bitrate=self._bitrate,
            )
        self._writer.write_frame(np.asarray(frame, dtype=np.uint8))

    def _finalize(self, output_path: Path) -> None:
        self._close_writer()
        partial_path(output_path).replace(output_path)

    def _abort(self) -> None:
        try:
            self._close_writer()
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring error while closing aborted stream: {e}")

    def _close_writer(self) -> None:
        if self._writer is not None:
            writer, self._writer = self._writer, None
            writer.close()


ENCODERS = {
    "dump": FrameDumpEncoder,
    "stream": StreamEncoder,
}


def create_encoder(name: str = "dump", **kwargs) -> VideoEncoder:
    """Create an encoder backend by name."""
    if name not in ENCODERS:
        raise ValueError(f"Unknown encoder: {name}. Available: {list(ENCODERS.keys())}")
    return ENCODERS[name](**kwargs)
