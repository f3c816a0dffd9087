"""Frame capture contract."""

from abc import ABC, abstractmethod
from typing import Optional

from PIL import Image

from ..models import Scene


class FrameCapture(ABC):
    """Produces a bitmap of a scene as it looks at a given instant.

    Implementations raise CaptureError when a snapshot cannot be produced.
    """

    @abstractmethod
    async def capture(
        self,
        scene: Scene,
        elapsed: float,
        pixel_ratio: float = 1.0,
        exit_at: Optional[float] = None,
    ) -> Image.Image:
        """Render ``scene`` as it appears ``elapsed`` seconds after it started.

        Args:
            scene: Scene to render.
            elapsed: Seconds since the scene became active.
            pixel_ratio: Pixel density multiplier (2.0 for high resolution).
            exit_at: Elapsed time at which the scene starts leaving. None
                keeps the scene on screen indefinitely.

        Returns:
            An RGB image.
        """
        ...
