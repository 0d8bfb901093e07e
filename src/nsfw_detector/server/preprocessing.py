"""Core image transformations that turn request bytes into model input.

Both functions are CPU bound and synchronous. The request pipeline runs them
on the worker pool, never on the event loop.
"""

import io

import numpy as np
from PIL import Image

from nsfw_detector.server.consts import NUM_CHANNELS, PIXEL_MAX
from nsfw_detector.server.exceptions import DecodeError, InferenceError
from nsfw_detector.server.models import PreprocessorConfig


def resampling_filter(code: int) -> Image.Resampling:
    """Map a PIL resampling code from the config to a filter.

    Raises:
        ValueError: If the code is not a known PIL resampling filter.

    """
    try:
        return Image.Resampling(code)
    except ValueError as e:
        msg = f"unsupported resample filter: {code}"
        raise ValueError(msg) from e


def decode_image(data: bytes) -> Image.Image:
    """Decode encoded image bytes into a fully loaded PIL image.

    Args:
        data: The raw bytes of a PNG, JPEG, GIF, WebP or any other format
            Pillow understands.

    Returns:
        The decoded image. Multi-frame formats yield their first frame.

    Raises:
        DecodeError: If the bytes are corrupt, truncated or in an unsupported
            format.

    """
    try:
        image = Image.open(io.BytesIO(data))
        # Image.open is lazy, pixel data is only read by load()
        image.load()
    except Exception as e:  # noqa: BLE001
        # Pillow plugins raise assorted types on hostile input, TypeError
        # and struct.error among them
        raise DecodeError(str(e) or DecodeError.default_message) from e
    return image


def image_to_tensor(
    image: Image.Image, config: PreprocessorConfig
) -> np.ndarray:
    """Transform a decoded image into the tensor the model expects.

    The steps are applied in a fixed order: RGB conversion, resize to the
    configured target, NCHW layout, rescale, then per-channel normalization.

    Args:
        image: A decoded image in any PIL mode.
        config: The model's preprocessing configuration.

    Returns:
        A contiguous float32 array of shape ``(1, 3, height, width)``.

    Raises:
        InferenceError: If resizing is disabled and the image does not
            already have the target size.

    """
    target_size = (config.size.width, config.size.height)

    rgb_image = image if image.mode == "RGB" else image.convert("RGB")
    if config.do_resize and rgb_image.size != target_size:
        rgb_image = rgb_image.resize(
            target_size, resample=resampling_filter(config.resample)
        )
    if rgb_image.size != target_size:
        msg = "Input tensor shape mismatch"
        raise InferenceError(msg)

    # (H, W, C) -> (1, C, H, W)
    pixels = np.asarray(rgb_image, dtype=np.float32)
    tensor = pixels.transpose(2, 0, 1)[np.newaxis, ...]

    if config.do_rescale:
        tensor = tensor * np.float32(config.rescale_factor)
    else:
        tensor = tensor / np.float32(PIXEL_MAX)

    if config.do_normalize:
        channel_shape = (1, NUM_CHANNELS, 1, 1)
        mean = np.asarray(config.image_mean, dtype=np.float32).reshape(
            channel_shape
        )
        std = np.asarray(config.image_std, dtype=np.float32).reshape(
            channel_shape
        )
        tensor = (tensor - mean) / std

    return np.ascontiguousarray(tensor, dtype=np.float32)
