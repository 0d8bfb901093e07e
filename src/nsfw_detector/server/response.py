"""Assembly of the uniform classification result.

Every terminal state of the pipeline, successful or not, ends up as a
``ClassificationResult`` built by one of the two functions below.
"""

from nsfw_detector.server.classification import classify
from nsfw_detector.server.consts import UNKNOWN_MODEL_VERSION
from nsfw_detector.server.exceptions import (
    DecodeError,
    DetectorError,
    InferenceError,
    ModelUnavailableError,
)
from nsfw_detector.server.models import (
    ClassificationLabel,
    ClassificationResult,
    DetectionScore,
    Prediction,
)


def success_result(prediction: Prediction) -> ClassificationResult:
    """Build the result of a successful prediction."""
    p_normal, p_unsafe = prediction.probabilities
    return ClassificationResult(
        label=classify(p_normal, p_unsafe),
        scores=(
            DetectionScore(label=ClassificationLabel.NORMAL, score=p_normal),
            DetectionScore(label=ClassificationLabel.UNSAFE, score=p_unsafe),
        ),
        model_version=prediction.model_version,
        error_message="",
    )


def failure_result(error: DetectorError) -> ClassificationResult:
    """Build the result of a request that failed at any stage."""
    return ClassificationResult(
        label=ClassificationLabel.UNKNOWN,
        scores=(),
        model_version=UNKNOWN_MODEL_VERSION,
        error_message=describe_error(error),
    )


def describe_error(error: DetectorError) -> str:
    """Render the user visible message for a pipeline failure.

    Input and acquisition errors already carry their full message; the
    other stages are prefixed with the stage that failed.
    """
    cause = str(error) or error.default_message
    if isinstance(error, ModelUnavailableError):
        return f"Model loading failed: {cause}"
    if isinstance(error, DecodeError):
        return f"Failed to decode image: {cause}"
    if isinstance(error, InferenceError):
        return f"Model prediction error: {cause}"
    return cause
