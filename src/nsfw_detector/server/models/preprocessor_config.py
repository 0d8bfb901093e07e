"""Preprocessing configuration shipped alongside the model.

The document follows the ``preprocessor_config.json`` layout used by image
processors on the Hugging Face hub, e.g.::

    {
        "do_normalize": true,
        "do_rescale": true,
        "do_resize": true,
        "image_mean": [0.5, 0.5, 0.5],
        "image_processor_type": "ViTImageProcessor",
        "image_std": [0.5, 0.5, 0.5],
        "resample": 2,
        "rescale_factor": 0.00392156862745098,
        "size": {"height": 224, "width": 224}
    }
"""

import json
import math
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from nsfw_detector.server.consts import NUM_CHANNELS


@dataclass(frozen=True)
class ImageSize:
    """Target size of the model input, in pixels."""

    height: int
    width: int


@dataclass(frozen=True)
class PreprocessorConfig:
    """Static parameters that reproduce the model's expected input.

    Attributes:
        size: Target height and width of the input tensor.
        do_resize: Whether to resize images to ``size``.
        do_rescale: Whether to multiply pixels by ``rescale_factor``. When
            False pixels are divided by 255 instead.
        do_normalize: Whether to apply per-channel mean/std normalization.
        rescale_factor: Multiplier applied to 8-bit pixel values.
        image_mean: Per-channel mean, in RGB order.
        image_std: Per-channel standard deviation, in RGB order.
        resample: PIL resampling filter code used when resizing.
        image_processor_type: Informational name of the upstream processor.

    """

    size: ImageSize
    do_resize: bool
    do_rescale: bool
    do_normalize: bool
    rescale_factor: float
    image_mean: tuple[float, float, float]
    image_std: tuple[float, float, float]
    resample: int
    image_processor_type: str = ""

    @classmethod
    def from_path(cls, path: Path) -> "PreprocessorConfig":
        """Load the configuration from a JSON document on disk.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If the document is not valid JSON or does not
                describe a usable configuration.

        """
        raw: object = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            msg = "preprocessor config must be a JSON object"
            raise ValueError(msg)  # noqa: TRY004
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "PreprocessorConfig":
        """Build the configuration from a parsed JSON object.

        Unknown keys are ignored.
        """
        size_raw = data.get("size")
        if not isinstance(size_raw, dict):
            msg = "size must be an object with height and width"
            raise ValueError(msg)  # noqa: TRY004
        size = ImageSize(
            height=_positive_int(size_raw, "height"),
            width=_positive_int(size_raw, "width"),
        )

        image_std = _channel_triple(data, "image_std")
        if any(value == 0.0 for value in image_std):
            msg = "image_std values must be non-zero"
            raise ValueError(msg)

        processor_type = data.get("image_processor_type", "")
        if not isinstance(processor_type, str):
            msg = "image_processor_type must be a string"
            raise ValueError(msg)  # noqa: TRY004

        return cls(
            size=size,
            do_resize=_bool(data, "do_resize"),
            do_rescale=_bool(data, "do_rescale"),
            do_normalize=_bool(data, "do_normalize"),
            rescale_factor=_float(data, "rescale_factor"),
            image_mean=_channel_triple(data, "image_mean"),
            image_std=image_std,
            resample=_int(data, "resample"),
            image_processor_type=processor_type,
        )


def _missing(key: str) -> ValueError:
    return ValueError(f"preprocessor config is missing '{key}'")


def _bool(data: Mapping[str, object], key: str) -> bool:
    if key not in data:
        raise _missing(key)
    value = data[key]
    if not isinstance(value, bool):
        msg = f"{key} must be a boolean"
        raise ValueError(msg)  # noqa: TRY004
    return value


def _int(data: Mapping[str, object], key: str) -> int:
    if key not in data:
        raise _missing(key)
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{key} must be an integer"
        raise ValueError(msg)  # noqa: TRY004
    return value


def _positive_int(data: Mapping[str, object], key: str) -> int:
    value = _int(data, key)
    if value <= 0:
        msg = f"{key} must be positive"
        raise ValueError(msg)
    return value


def _number(value: object, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        msg = f"{key} must be a number"
        raise ValueError(msg)  # noqa: TRY004
    result = float(value)
    if not math.isfinite(result):
        msg = f"{key} must be finite"
        raise ValueError(msg)
    return result


def _float(data: Mapping[str, object], key: str) -> float:
    if key not in data:
        raise _missing(key)
    return _number(data[key], key)


def _channel_triple(
    data: Mapping[str, object], key: str
) -> tuple[float, float, float]:
    if key not in data:
        raise _missing(key)
    value = data[key]
    if not isinstance(value, list) or len(value) != NUM_CHANNELS:
        msg = f"{key} must be a list of {NUM_CHANNELS} numbers"
        raise ValueError(msg)  # noqa: TRY004
    first, second, third = (_number(item, key) for item in value)
    return first, second, third
