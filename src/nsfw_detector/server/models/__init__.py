"""Package containing the data models of the NSFW detector server.

This package contains the request, configuration and result models that flow
through the detection pipeline.
"""

from .classification import (
    ClassificationLabel,
    ClassificationResult,
    DetectionScore,
    Prediction,
)
from .input_model import (
    ClassificationRequest,
    ImageSource,
    InlineImage,
    NoImageSource,
    RemoteImage,
)
from .preprocessor_config import ImageSize, PreprocessorConfig

__all__ = [
    "ClassificationLabel",
    "ClassificationRequest",
    "ClassificationResult",
    "DetectionScore",
    "ImageSize",
    "ImageSource",
    "InlineImage",
    "NoImageSource",
    "Prediction",
    "PreprocessorConfig",
    "RemoteImage",
]
