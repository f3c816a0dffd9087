"""Exception hierarchy for LuminaBook."""


class LuminaError(Exception):
    """Base class for all LuminaBook errors."""


class ValidationError(LuminaError):
    """A structural invariant would be violated. No state was changed."""


class SceneNotFoundError(ValidationError):
    """No scene with the requested id exists in the store."""

    def __init__(self, scene_id: str) -> None:
        super().__init__(f"Scene not found: {scene_id}")
        self.scene_id = scene_id


class BusyError(LuminaError):
    """The shared active-scene pointer is owned by another activity."""


class ExportBusyError(BusyError):
    """Another export job is already capturing or encoding."""


class ImportFormatError(LuminaError):
    """Imported content could not be read. Existing scenes are retained."""


class ExportError(LuminaError):
    """Base class for failures that abort an export job."""


class CaptureError(ExportError):
    """A frame snapshot could not be produced."""


class EncodeError(ExportError):
    """The video encoder rejected a frame or failed to finalize."""


class TransientSuggestionError(LuminaError):
    """The style suggestion service call failed."""
