"""Exception hierarchy for camtop."""


class CamtopError(Exception):
    """Base class for all camtop errors."""


class ConfigError(CamtopError):
    """Raised when the configuration file cannot be read or holds bad values."""


class MetricsError(CamtopError):
    """Raised when an OS counter source is malformed."""


class DetectorLoadError(CamtopError):
    """Raised when the face-detection cascade cannot be loaded."""


class CaptureOpenError(CamtopError):
    """Raised when the video capture device cannot be opened."""
