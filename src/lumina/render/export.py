"""Export pipeline: still snapshots and frame-exact video."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from ..config import config
from ..editor.store import OWNER_EXPORT, SceneStore
from ..engine.animation import settle_time
from ..engine.timing import compute_scene_envelope, export_duration, frame_budget
from ..errors import CaptureError, EncodeError, ExportBusyError, ExportError
from ..models import ExportJob, ExportKind, ExportStatus
from .capture import FrameCapture
from .encoder import FrameDumpEncoder, VideoEncoder

logger = logging.getLogger(__name__)

ProgressListener = Callable[[ExportJob], None]
Sleep = Callable[[float], Awaitable[None]]


class ExportPipeline:
    """Turns the store's scenes into a still image or a video file.

    Video frames are emitted on a fixed per-scene budget of
    ceil(total_scene_time * fps) frames, each sampled at k / fps seconds into
    its scene. How long a capture actually takes never changes what is
    sampled, so the file's duration always matches the timing model.

    Only one video export runs per store at a time: during a video export the
    pipeline holds the store's active-scene pointer, and a second pipeline
    on the same store is turned away. Each pipeline also runs one job of
    either kind at a time.
    """

    def __init__(
        self,
        store: SceneStore,
        capture: FrameCapture,
        encoder_factory: Callable[[], VideoEncoder] = FrameDumpEncoder,
        fps: Optional[int] = None,
        settle_delay: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the pipeline.

        Args:
            store: Scene store to export from.
            capture: Frame capture adapter.
            encoder_factory: Creates a fresh encoder for each video job.
            fps: Output frame rate. Defaults to config.output_fps.
            settle_delay: Wait after activating a scene. Defaults to config.settle_delay.
            sleep: Coroutine used for the settle wait.
        """
        self._store = store
        self._capture = capture
        self._encoder_factory = encoder_factory
        self._fps = fps or config.output_fps
        self._settle_delay = config.settle_delay if settle_delay is None else settle_delay
        self._sleep = sleep
        self._job = ExportJob()
        self._listeners: List[ProgressListener] = []

    @property
    def job(self) -> ExportJob:
        return self._job

    @property
    def is_busy(self) -> bool:
        return self._job.is_active

    @property
    def fps(self) -> int:
        return self._fps

    def on_progress(self, listener: ProgressListener) -> None:
        """Register a callback invoked whenever the job state changes."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self._job)

    def _begin(self, kind: ExportKind, message: str) -> ExportJob:
        if self.is_busy:
            raise ExportBusyError(f"An export is already {self._job.status.value}")
        self._job = ExportJob(
            kind=kind,
            status=ExportStatus.CAPTURING,
            progress_message=message,
            started_at=datetime.now(),
        )
        self._notify()
        return self._job

    def _fail(self, job: ExportJob, error: ExportError) -> None:
        job.status = ExportStatus.FAILED
        job.error = str(error)
        job.progress_message = f"Export failed: {error}"
        job.completed_at = datetime.now()
        logger.error(job.progress_message)
        self._notify()

    async def export_still(self, output_path: Path, pixel_ratio: Optional[float] = None) -> ExportJob:
        """Save one high-resolution snapshot of the active scene.

        The scene is captured in its settled state. Playback is not touched.

        Raises:
            ExportBusyError: If another export is running.
            CaptureError: If the snapshot fails.
        """
        ratio = pixel_ratio or config.still_pixel_ratio
        job = self._begin(ExportKind.STILL, "Generating high-resolution snapshot...")
        scene = self._store.active_scene
        job.scene_index = self._store.active_index
        job.total_frames = 1

        output_path = Path(output_path)
        try:
            try:
                image = await self._capture.capture(scene, settle_time(scene), ratio)
            except CaptureError:
                raise
            except Exception as e:
                raise CaptureError(f"Capture failed for scene {scene.id}: {e}") from e
            try:
                output_path.parent.mkdir(parents=True, exist_ok=True)
                image.save(output_path, format="PNG")
            except (OSError, ValueError) as e:
                raise CaptureError(f"Failed to save snapshot {output_path}: {e}") from e
        except CaptureError as e:
            self._fail(job, e)
            raise
        except (Exception, asyncio.CancelledError) as e:
            self._fail(job, ExportError(f"Export aborted: {e!r}"))
            raise

        job.frame_counter = 1
        job.output_path = output_path
        job.status = ExportStatus.DONE
        job.progress_message = f"Saved {output_path}"
        job.completed_at = datetime.now()
        job.metadata = {"scene_id": scene.id, "pixel_ratio": ratio, "size": list(image.size)}
        logger.info(f"Exported snapshot of scene {scene.id} to {output_path}")
        self._notify()
        return job

    async def export_video(self, output_path: Path) -> ExportJob:
        """Render every scene in order and encode the frames into one video.

        The last moments of each scene show the exit transition, so scenes
        fade out instead of cutting.

        Raises:
            ExportBusyError: If another export is running, on this pipeline or
                on any other pipeline sharing the store.
            BusyError: If playback owns the active scene.
            CaptureError: If a frame cannot be captured.
            EncodeError: If the encoder rejects a frame or fails to finalize.
        """
        if self.is_busy:
            raise ExportBusyError(f"An export is already {self._job.status.value}")
        claim = self._store.claim(OWNER_EXPORT)

        try:
            return await self._run_video(Path(output_path))
        finally:
            self._store.release(claim)

    async def _run_video(self, output_path: Path) -> ExportJob:
        project = self._store.project
        scenes = project.scenes
        budget = frame_budget(project, self._fps)
        previous_active = self._store.active_id

        job = self._begin(ExportKind.VIDEO, "Initializing render...")
        job.total_frames = sum(budget)
        job.metadata = {
            "fps": self._fps,
            "duration": export_duration(project),
            "frames_per_scene": budget,
        }
        logger.info(
            f"Exporting {len(scenes)} scenes, {job.total_frames} frames "
            f"at {self._fps} fps to {output_path}"
        )

        encoder = self._encoder_factory()
        try:
            encoder.open(output_path, self._fps)
            for scene_index, (scene, frame_count) in enumerate(zip(scenes, budget)):
                exit_at = compute_scene_envelope(scene, project).exit_at
                self._store.select(scene.id, owner=OWNER_EXPORT)
                job.scene_index = scene_index
                job.progress_message = f"Preparing scene {scene_index + 1}/{len(scenes)}"
                self._notify()
                await self._sleep(self._settle_delay)

                for frame_index in range(frame_count):
                    try:
                        frame = await self._capture.capture(
                            scene, frame_index / self._fps, 1.0, exit_at=exit_at
                        )
                    except CaptureError:
                        raise
                    except Exception as e:
                        raise CaptureError(
                            f"Capture failed for scene {scene.id} frame {frame_index}: {e}"
                        ) from e
                    encoder.append_frame(frame, job.frame_counter)
                    job.frame_counter += 1
                    job.progress_message = (
                        f"Rendering scene {scene_index + 1}/{len(scenes)}, "
                        f"frame {frame_index + 1}/{frame_count}"
                    )
                    logger.debug(job.progress_message)
                    self._notify()

            job.status = ExportStatus.ENCODING
            job.progress_message = "Encoding video..."
            self._notify()
            result = encoder.finalize()

        except (CaptureError, EncodeError) as e:
            encoder.discard()
            self._fail(job, e)
            raise
        except (Exception, asyncio.CancelledError) as e:
            encoder.discard()
            self._fail(job, ExportError(f"Export aborted: {e!r}"))
            raise
        finally:
            self._store.select(previous_active, owner=OWNER_EXPORT)

        job.output_path = result
        job.status = ExportStatus.DONE
        job.progress_message = f"Saved {result}"
        job.completed_at = datetime.now()
        logger.info(f"Video export finished: {result} ({job.frame_counter} frames)")
        self._notify()
        return job
