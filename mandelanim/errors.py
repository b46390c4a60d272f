class MandelanimError(Exception):
    """Base class for errors that abort a render run."""


class OutputSetupError(MandelanimError):
    """The output directory could not be prepared."""


class EncodeError(MandelanimError):
    """A frame could not be encoded or written to disk."""


class ConfigError(MandelanimError, ValueError):
    """Configuration values are missing or out of range."""


class RendererUnavailableError(MandelanimError, RuntimeError):
    """The requested renderer cannot run on this machine."""


class ManifestError(MandelanimError):
    """The run manifest could not be written."""


class CleanupError(MandelanimError):
    """Rendered frames could not be removed."""
