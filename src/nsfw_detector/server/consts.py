"""Constants shared across the NSFW detector server."""

from pathlib import Path

MODEL_FILENAME = "model.onnx"
PREPROCESSOR_CONFIG_FILENAME = "preprocessor_config.json"
DEFAULT_MODEL_DIR = Path("model")

# Index order of the model's output vector: {"0": "normal", "1": "nsfw"}
NORMAL_INDEX = 0
UNSAFE_INDEX = 1
NUM_CLASSES = 2

UNSAFE_THRESHOLD = 0.5

DEFAULT_MODEL_VERSION = "0.1.0"
UNKNOWN_MODEL_VERSION = "unknown"
MODEL_VERSION_METADATA_KEY = "model_version"

DEFAULT_HOST = "[::]"
DEFAULT_PORT = 50051
MAX_DEFAULT_WORKERS = 8

NUM_CHANNELS = 3
PIXEL_MAX = 255.0

DEFAULT_LOG_LEVEL = "INFO"
# Remote images larger than this are rejected while downloading
DEFAULT_MAX_IMAGE_BYTES = 32 * 1024 * 1024
