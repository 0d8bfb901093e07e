"""The loaded NSFW classifier and its one-shot load outcome.

The model is loaded exactly once, when the server starts. Whatever happens
during that load is captured in a ``ModelLoadOutcome`` that is handed to the
request handler and never recomputed: a missing or malformed artifact is
reported to every request for the lifetime of the process instead of being
retried.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import onnxruntime as ort
from PIL import Image

from nsfw_detector.server.classification import softmax
from nsfw_detector.server.consts import (
    DEFAULT_MODEL_VERSION,
    MODEL_FILENAME,
    MODEL_VERSION_METADATA_KEY,
    NORMAL_INDEX,
    NUM_CHANNELS,
    NUM_CLASSES,
    PREPROCESSOR_CONFIG_FILENAME,
    UNSAFE_INDEX,
)
from nsfw_detector.server.exceptions import (
    InferenceError,
    ModelUnavailableError,
)
from nsfw_detector.server.models import Prediction, PreprocessorConfig
from nsfw_detector.server.preprocessing import (
    image_to_tensor,
    resampling_filter,
)

logger = logging.getLogger(__name__)

_EXECUTION_PROVIDERS = ["CPUExecutionProvider"]


class NsfwModel:
    """An ONNX binary classifier paired with its preprocessing config.

    Instances are immutable after construction and safe to share between
    threads; ``predict`` holds no locks.
    """

    def __init__(
        self,
        session: ort.InferenceSession,
        config: PreprocessorConfig,
        model_version: str = DEFAULT_MODEL_VERSION,
    ) -> None:
        """Wrap an already created inference session.

        Args:
            session: The ONNX Runtime session to run.
            config: Preprocessing parameters matching the session's input.
            model_version: Opaque version string reported with predictions.

        Raises:
            ModelUnavailableError: If the session's declared input does not
                accept a ``(1, 3, height, width)`` tensor.

        """
        inputs = session.get_inputs()
        if not inputs:
            msg = "Model declares no inputs"
            raise ModelUnavailableError(msg)
        expected_shape = (
            1,
            NUM_CHANNELS,
            config.size.height,
            config.size.width,
        )
        _check_input_shape(inputs[0].shape, expected_shape)

        self._session = session
        self._input_name: str = inputs[0].name
        self._config = config
        self._model_version = model_version

    @property
    def config(self) -> PreprocessorConfig:
        """The preprocessing configuration of this model."""
        return self._config

    @property
    def model_version(self) -> str:
        """The opaque version string of this model."""
        return self._model_version

    @classmethod
    def from_directory(
        cls, model_dir: Path, *, intra_op_threads: int = 0
    ) -> "NsfwModel":
        """Load the model and its preprocessing config from a directory.

        The directory must contain ``model.onnx`` and
        ``preprocessor_config.json``.

        Args:
            model_dir: Directory holding the model artifacts.
            intra_op_threads: Threads ONNX Runtime may use per inference.
                Zero keeps the runtime's default.

        Raises:
            ModelUnavailableError: If an artifact is missing or malformed, or
                the inference session cannot be created.

        """
        model_path = model_dir / MODEL_FILENAME
        config_path = model_dir / PREPROCESSOR_CONFIG_FILENAME

        logger.info("Loading model from: %s", model_path)
        logger.info("Loading preprocessor config from: %s", config_path)

        if not model_path.is_file():
            msg = f"Model file not found: {model_path}"
            raise ModelUnavailableError(msg)
        if not config_path.is_file():
            msg = f"Preprocessor config file not found: {config_path}"
            raise ModelUnavailableError(msg)

        try:
            config = PreprocessorConfig.from_path(config_path)
            resampling_filter(config.resample)
        except (OSError, ValueError) as e:
            msg = f"Invalid preprocessor config {config_path}: {e}"
            raise ModelUnavailableError(msg) from e

        logger.info("Preprocessor config loaded: %s", config)
        logger.info(
            "Creating model with input shape: [1, %d, %d, %d]",
            NUM_CHANNELS,
            config.size.height,
            config.size.width,
        )

        session_options = ort.SessionOptions()
        if intra_op_threads > 0:
            session_options.intra_op_num_threads = intra_op_threads

        try:
            session = ort.InferenceSession(
                str(model_path),
                sess_options=session_options,
                providers=_EXECUTION_PROVIDERS,
            )
        except Exception as e:
            msg = f"Failed to create inference session: {e}"
            raise ModelUnavailableError(msg) from e

        return cls(session, config, _read_model_version(session))

    def predict(self, image: Image.Image) -> Prediction:
        """Classify a decoded image.

        Args:
            image: A decoded image in any PIL mode and size.

        Returns:
            The softmax probabilities ``(normal, unsafe)`` and model version.

        Raises:
            InferenceError: If the image cannot be turned into the expected
                tensor, the runtime fails, or the output is not two finite
                scores.

        """
        try:
            tensor = image_to_tensor(image, self._config)
        except (OSError, ValueError) as e:
            msg = f"Image preprocessing failed: {e}"
            raise InferenceError(msg) from e

        try:
            outputs = self._session.run(None, {self._input_name: tensor})
        except Exception as e:
            msg = f"ONNX inference error: {e}"
            raise InferenceError(msg) from e

        probabilities = softmax(_output_scores(outputs))
        return Prediction(
            probabilities=(
                probabilities[NORMAL_INDEX],
                probabilities[UNSAFE_INDEX],
            ),
            model_version=self._model_version,
        )


@dataclass(frozen=True)
class ModelReady:
    """The model loaded and is ready to serve."""

    model: NsfwModel


@dataclass(frozen=True)
class ModelLoadFailed:
    """The model could not be loaded; the error is reported to every call."""

    error: ModelUnavailableError


ModelLoadOutcome = ModelReady | ModelLoadFailed


def load_model(
    model_dir: Path, *, intra_op_threads: int = 0
) -> ModelLoadOutcome:
    """Attempt to load the model once and capture the outcome.

    Args:
        model_dir: Directory holding ``model.onnx`` and
            ``preprocessor_config.json``.
        intra_op_threads: Threads ONNX Runtime may use per inference.

    Returns:
        ``ModelReady`` on success, ``ModelLoadFailed`` otherwise. This
        function never raises for a bad model directory.

    """
    try:
        model = NsfwModel.from_directory(
            model_dir, intra_op_threads=intra_op_threads
        )
    except ModelUnavailableError as e:
        logger.error("Failed to load NSFW model: %s", e)  # noqa: TRY400
        return ModelLoadFailed(e)

    logger.info("Model loaded successfully (version %s)", model.model_version)
    return ModelReady(model)


def _check_input_shape(
    declared: Sequence[object], expected: tuple[int, ...]
) -> None:
    # Symbolic dimensions (str or None) accept any size
    if len(declared) != len(expected) or any(
        isinstance(dim, int) and dim != want
        for dim, want in zip(declared, expected, strict=True)
    ):
        msg = (
            f"Model input shape {list(declared)} does not accept "
            f"{list(expected)}"
        )
        raise ModelUnavailableError(msg)


def _read_model_version(session: ort.InferenceSession) -> str:
    metadata = session.get_modelmeta().custom_metadata_map
    return metadata.get(MODEL_VERSION_METADATA_KEY) or DEFAULT_MODEL_VERSION


def _output_scores(outputs: Sequence[object]) -> np.ndarray:
    err = "Model output format unexpected"
    if not outputs:
        raise InferenceError(err)
    try:
        scores = np.asarray(outputs[0], dtype=np.float32).reshape(-1)
    except (TypeError, ValueError) as e:
        raise InferenceError(err) from e
    if scores.size != NUM_CLASSES or not np.all(np.isfinite(scores)):
        raise InferenceError(err)
    return scores
