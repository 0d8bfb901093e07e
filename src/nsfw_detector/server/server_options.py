"""Options object for the NSFW detector server."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from nsfw_detector.server.consts import (
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_IMAGE_BYTES,
    DEFAULT_MODEL_DIR,
    DEFAULT_PORT,
    MAX_DEFAULT_WORKERS,
)
from nsfw_detector.server.exceptions import ConfigurationError

MODEL_DIR_ENV = "MODEL_DIR"
HOST_ENV = "NSFW_DETECTOR_HOST"
PORT_ENV = "NSFW_DETECTOR_PORT"
MAX_WORKERS_ENV = "NSFW_DETECTOR_MAX_WORKERS"
INFERENCE_THREADS_ENV = "NSFW_DETECTOR_INFERENCE_THREADS"
FETCH_TIMEOUT_ENV = "NSFW_DETECTOR_FETCH_TIMEOUT"
MAX_IMAGE_BYTES_ENV = "NSFW_DETECTOR_MAX_IMAGE_BYTES"
LOG_LEVEL_ENV = "NSFW_DETECTOR_LOG_LEVEL"

_MAX_PORT = 65535


@dataclass
class ServerOptions:
    """Options for configuring the NSFW detector server.

    Attributes:
        host: The interface to listen on. Defaults to "[::]".
        port: The port to listen on. Defaults to 50051.
        model_dir: Directory containing ``model.onnx`` and
            ``preprocessor_config.json``. Defaults to "model".
        max_workers: Size of the worker pool that decodes images and runs
            inference. Zero picks ``min(8, cpu_count)``.
            Defaults to 0.
        inference_threads: Threads ONNX Runtime may use inside a single
            inference. Zero keeps the runtime's default.
            Defaults to 0.
        fetch_timeout: Timeout in seconds for downloading remote images.
            None disables the timeout; deadlines are then left to the
            caller's gRPC deadline.
            Defaults to None.
        max_image_bytes: Largest remote image the server downloads, in
            bytes. Zero disables the limit. Defaults to 32 MiB.
        log_level: Name of the root logging level. Defaults to "INFO".

    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    model_dir: Path = DEFAULT_MODEL_DIR
    max_workers: int = 0
    inference_threads: int = 0
    fetch_timeout: float | None = None
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def address(self) -> str:
        """The ``host:port`` address to bind."""
        return f"{self.host}:{self.port}"

    @property
    def worker_count(self) -> int:
        """The effective size of the worker pool."""
        if self.max_workers > 0:
            return self.max_workers
        return min(MAX_DEFAULT_WORKERS, os.cpu_count() or 1)

    @property
    def image_size_limit(self) -> int | None:
        """The download limit for remote images, None when disabled."""
        return self.max_image_bytes or None

    @classmethod
    def from_env(cls) -> "ServerOptions":
        """Build options from environment variables.

        A ``.env`` file in the working directory is loaded first, without
        overriding variables that are already set.

        Raises:
            ConfigurationError: If a variable holds an invalid value.

        """
        load_dotenv()
        defaults = cls()

        port = _int_env(PORT_ENV, defaults.port)
        if not 1 <= port <= _MAX_PORT:
            msg = f"{PORT_ENV} out of range: {port}"
            raise ConfigurationError(msg)

        return cls(
            host=os.getenv(HOST_ENV) or defaults.host,
            port=port,
            model_dir=Path(os.getenv(MODEL_DIR_ENV) or defaults.model_dir),
            max_workers=_int_env(MAX_WORKERS_ENV, defaults.max_workers),
            inference_threads=_int_env(
                INFERENCE_THREADS_ENV, defaults.inference_threads
            ),
            fetch_timeout=_timeout_env(FETCH_TIMEOUT_ENV),
            max_image_bytes=_int_env(
                MAX_IMAGE_BYTES_ENV, defaults.max_image_bytes
            ),
            log_level=_log_level_env(LOG_LEVEL_ENV, defaults.log_level),
        )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ConfigurationError(msg) from e
    if value < 0:
        msg = f"{name} cannot be negative, got {value}"
        raise ConfigurationError(msg)
    return value


def _timeout_env(name: str) -> float | None:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as e:
        msg = f"{name} must be a number of seconds, got {raw!r}"
        raise ConfigurationError(msg) from e
    if value <= 0:
        msg = f"{name} must be positive, got {value}"
        raise ConfigurationError(msg)
    return value


def _log_level_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if not raw:
        return default
    level = raw.upper()
    if level not in logging.getLevelNamesMapping():
        msg = f"{name} must be a logging level name, got {raw!r}"
        raise ConfigurationError(msg)
    return level
