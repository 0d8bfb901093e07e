"""Classification outcome models.

These are the domain-side counterparts of the wire messages. A
``ClassificationResult`` is built once per request, either from a
``Prediction`` or from an error, and is never mutated afterwards.
"""

import enum
from dataclasses import dataclass


class ClassificationLabel(enum.IntEnum):
    """Overall classification of an image.

    Values match the ``ClassificationLabel`` enum of the wire schema.
    """

    UNKNOWN = 0
    NORMAL = 1
    UNSAFE = 2


@dataclass(frozen=True)
class DetectionScore:
    """Probability assigned to a single label."""

    label: ClassificationLabel
    score: float


@dataclass(frozen=True)
class Prediction:
    """Calibrated model output for a single image.

    Attributes:
        probabilities: Softmax probabilities ordered ``(normal, unsafe)``.
        model_version: Opaque description of the model that produced them.

    """

    probabilities: tuple[float, float]
    model_version: str

    @property
    def p_normal(self) -> float:
        """Probability that the image is normal."""
        return self.probabilities[0]

    @property
    def p_unsafe(self) -> float:
        """Probability that the image is unsafe."""
        return self.probabilities[1]


@dataclass(frozen=True)
class ClassificationResult:
    """Uniform outcome of a detection request.

    Attributes:
        label: Overall classification, ``UNKNOWN`` on any failure.
        scores: Per-label scores, empty on any failure.
        model_version: Version of the model, ``"unknown"`` on failure.
        error_message: Human readable failure description, empty on success.

    """

    label: ClassificationLabel
    scores: tuple[DetectionScore, ...]
    model_version: str
    error_message: str = ""

    @property
    def succeeded(self) -> bool:
        """Whether the request produced a classification."""
        return not self.error_message
