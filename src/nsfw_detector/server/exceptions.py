"""Base classes for all NSFW detector exceptions.

Every per-request failure is one of the ``DetectorError`` subclasses below.
The request pipeline catches them and turns them into an ``UNKNOWN``
classification with a populated ``error_message``; none of them ever reach
the transport layer.
"""


class DetectorError(Exception):
    """Base class for all NSFW detector exceptions."""

    default_message = "NSFW detector error"


class ConfigurationError(DetectorError):
    """Raised when the server options are invalid."""

    default_message = "Invalid server configuration"


class ModelUnavailableError(DetectorError):
    """Raised when the model artifacts could not be loaded.

    The failure is sticky: it is captured once at startup and reported to
    every request for the lifetime of the process.
    """

    default_message = "Model is not available"


class InputError(DetectorError):
    """Raised when the request carries no usable image source."""

    default_message = "No image data could be processed."


class AcquisitionError(DetectorError):
    """Raised when a remote image could not be fetched."""

    default_message = "Failed to fetch image"


class DecodeError(DetectorError):
    """Raised when image bytes cannot be decoded."""

    default_message = "Unsupported or corrupt image data"


class InferenceError(DetectorError):
    """Raised when the model cannot produce a prediction for an input."""

    default_message = "Model output format unexpected"


class InvalidHostError(DetectorError):
    """Raised when a client is pointed at an empty host."""

    default_message = "host cannot be empty"


class WorkerError(Exception):
    """Raised when work could not be completed on the worker pool.

    Unlike ``DetectorError`` this is not a request outcome: it means the
    server itself is unhealthy, so it fails the call at transport level.
    """
