#!/usr/bin/env python3
"""Example script classifying a single image with a running server.

Usage::

    python examples/classify_example.py path/to/image.jpg
    python examples/classify_example.py https://example.com/image.png
"""

import asyncio
import logging
import os
import sys
import uuid
from pathlib import Path

from dotenv import load_dotenv

from nsfw_detector.generated.nsfw_detector_pb2 import ClassificationLabel
from nsfw_detector.grpc_wrappers.channel import create_channel
from nsfw_detector.grpc_wrappers.detector_service import NsfwDetectorClient

DEFAULT_ADDRESS = "localhost:50051"


async def classify(
    logger: logging.Logger, address: str, image_ref: str
) -> int:
    """Classify an image file or URL and log the response.

    Args:
    ----
        logger: Logger instance for output
        address: The ``host:port`` of the NSFW detector server
        image_ref: A local file path or an http(s) URL

    Returns:
    -------
        Process exit code, non-zero when the server reported an error

    """
    channel = create_channel(address)
    client = NsfwDetectorClient(channel)
    request_id = uuid.uuid4().hex

    try:
        if image_ref.startswith(("http://", "https://")):
            response = await client.detect_nsfw(request_id, image_url=image_ref)
        else:
            response = await client.detect_nsfw(
                request_id, image_data=Path(image_ref).read_bytes()
            )
    finally:
        await channel.close()

    label = ClassificationLabel.Name(response.overall_classification)
    if response.error_message:
        logger.error(
            "✗ %s: %s (%s)", response.request_id, label, response.error_message
        )
        return 1

    logger.info(
        "✓ %s: %s (model %s)",
        response.request_id,
        label,
        response.model_version,
    )
    for score in response.scores:
        logger.info(
            "  %s: %.4f", ClassificationLabel.Name(score.label), score.score
        )
    return 0


async def main() -> int:
    """Run the single image classification example."""
    logger = logging.getLogger(__name__)
    _ = load_dotenv()

    if len(sys.argv) != 2:  # noqa: PLR2004
        logger.error("Usage: %s <image path or URL>", sys.argv[0])
        return 2

    address = os.getenv("NSFW_DETECTOR_ADDRESS", DEFAULT_ADDRESS)
    logger.info("Connecting to %s", address)
    return await classify(logger, address, sys.argv[1])


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    sys.exit(asyncio.run(main()))
