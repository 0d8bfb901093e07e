"""NSFW Detector Server.

This module provides the image classification pipeline served over gRPC.
"""

from nsfw_detector.server.exceptions import (
    AcquisitionError,
    ConfigurationError,
    DecodeError,
    DetectorError,
    InferenceError,
    InputError,
    ModelUnavailableError,
    WorkerError,
)
from nsfw_detector.server.model_handle import (
    ModelLoadFailed,
    ModelLoadOutcome,
    ModelReady,
    NsfwModel,
    load_model,
)
from nsfw_detector.server.server_options import ServerOptions

__all__ = [
    "AcquisitionError",
    "ConfigurationError",
    "DecodeError",
    "DetectorError",
    "InferenceError",
    "InputError",
    "ModelLoadFailed",
    "ModelLoadOutcome",
    "ModelReady",
    "ModelUnavailableError",
    "NsfwModel",
    "ServerOptions",
    "WorkerError",
    "load_model",
]
