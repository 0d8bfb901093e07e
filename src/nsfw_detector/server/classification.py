"""Conversion of raw model scores into a calibrated decision."""

from collections.abc import Sequence

import numpy as np

from nsfw_detector.server.consts import UNSAFE_THRESHOLD
from nsfw_detector.server.models import ClassificationLabel


def softmax(scores: Sequence[float] | np.ndarray) -> list[float]:
    """Normalize raw per-class scores into probabilities.

    The maximum score is subtracted before exponentiation so that large
    logits cannot overflow.

    Args:
        scores: Raw per-class scores (logits).

    Returns:
        Probabilities in the same order as ``scores``, summing to 1.

    """
    values = np.asarray(scores, dtype=np.float32).reshape(-1)
    exps = np.exp(values - values.max())
    return [float(p) for p in exps / exps.sum()]


def classify(p_normal: float, p_unsafe: float) -> ClassificationLabel:
    """Apply the binary decision rule.

    An image is unsafe only when the unsafe probability both beats the
    normal probability and is strictly above 0.5; an exact 0.5 tie is
    normal.
    """
    if p_unsafe > p_normal and p_unsafe > UNSAFE_THRESHOLD:
        return ClassificationLabel.UNSAFE
    return ClassificationLabel.NORMAL
