"""Resolution of a request's image source into raw encoded bytes."""

import logging
import sys
from typing import assert_never

import httpx

from nsfw_detector.server.exceptions import AcquisitionError, InputError
from nsfw_detector.server.models import (
    ImageSource,
    InlineImage,
    NoImageSource,
    RemoteImage,
)

logger = logging.getLogger(__name__)

EMPTY_IMAGE_DATA_MESSAGE = "Received empty image_data."
EMPTY_IMAGE_URL_MESSAGE = "Received empty image_url."
NO_IMAGE_SOURCE_MESSAGE = "No image_source provided in the request."
NO_IMAGE_DATA_MESSAGE = "No image data could be processed."


async def acquire_image_bytes(
    source: ImageSource,
    http_client: httpx.AsyncClient,
    *,
    max_bytes: int | None = None,
) -> bytes:
    """Get the encoded image bytes a request refers to.

    Inline bytes are returned as they are. Remote images are downloaded
    with ``http_client``; redirects are followed according to the client's
    settings.

    Args:
        source: The image source of the request.
        http_client: Shared HTTP client used for remote images.
        max_bytes: Largest remote image accepted, in bytes. None accepts
            any size. Inline bytes are bounded by the gRPC message limit.

    Returns:
        The non-empty encoded image bytes.

    Raises:
        InputError: If the source is missing or empty.
        AcquisitionError: If a remote image cannot be downloaded or is
            larger than ``max_bytes``.

    """
    if isinstance(source, InlineImage):
        if not source.data:
            raise InputError(EMPTY_IMAGE_DATA_MESSAGE)
        return source.data
    if isinstance(source, RemoteImage):
        if not source.url:
            raise InputError(EMPTY_IMAGE_URL_MESSAGE)
        return await _fetch(source.url, http_client, max_bytes)
    if isinstance(source, NoImageSource):
        raise InputError(NO_IMAGE_SOURCE_MESSAGE)
    assert_never(source)


async def _fetch(
    url: str, http_client: httpx.AsyncClient, max_bytes: int | None
) -> bytes:
    logger.info("Fetching image from URL: %s", url)
    try:
        async with http_client.stream("GET", url) as response:
            response.raise_for_status()
            data = await _read_body(url, response, max_bytes)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        msg = f"Failed to fetch image from URL {url}: {e}"
        raise AcquisitionError(msg) from e

    if not data:
        raise AcquisitionError(NO_IMAGE_DATA_MESSAGE)
    logger.debug("Fetched %d bytes from %s", len(data), url)
    return data


async def _read_body(
    url: str, response: httpx.Response, max_bytes: int | None
) -> bytes:
    limit = max_bytes if max_bytes is not None else sys.maxsize
    declared = response.headers.get("Content-Length", "")
    if declared.isdigit() and int(declared) > limit:
        raise AcquisitionError(_too_large_message(url, limit))

    body = bytearray()
    try:
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > limit:
                raise AcquisitionError(_too_large_message(url, limit))
    except httpx.HTTPError as e:
        msg = f"Failed to read bytes from URL {url}: {e}"
        raise AcquisitionError(msg) from e
    return bytes(body)


def _too_large_message(url: str, max_bytes: int) -> str:
    return f"Image at URL {url} is larger than {max_bytes} bytes"
