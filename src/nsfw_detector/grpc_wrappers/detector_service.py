"""Low-level gRPC plumbing for the NsfwDetector service.

Wraps the generated client stub and converts between wire messages and the
server's domain models.
"""

import grpc.aio

from nsfw_detector.generated.nsfw_detector_pb2 import (
    DESCRIPTOR,
    DetectionScore,
    NsfwDetectionRequest,
    NsfwDetectionResponse,
)
from nsfw_detector.generated.nsfw_detector_pb2_grpc import NsfwDetectorStub
from nsfw_detector.server.models import (
    ClassificationRequest,
    ClassificationResult,
    ImageSource,
    InlineImage,
    NoImageSource,
    RemoteImage,
)

SERVICE_NAME: str = DESCRIPTOR.services_by_name["NsfwDetector"].full_name
DETECT_NSFW_METHOD = f"/{SERVICE_NAME}/DetectNsfw"


class NsfwDetectorClient:
    """Low-level gRPC wrapper for the NsfwDetector service."""

    def __init__(self, channel: grpc.aio.Channel) -> None:
        """Initialize the client with a gRPC channel.

        Args:
            channel (grpc.aio.Channel): A gRPC channel to communicate with the
            server.

        """
        self.stub = NsfwDetectorStub(channel)

    async def detect_nsfw(
        self,
        request_id: str,
        *,
        image_data: bytes | None = None,
        image_url: str | None = None,
        timeout: float | None = None,
    ) -> NsfwDetectionResponse:
        """Classify a single image.

        At most one of ``image_data`` and ``image_url`` may be given. Leaving
        both out sends a request without an image source, which the server
        answers with an ``UNKNOWN`` classification.

        Args:
            request_id: Identifier echoed back in the response.
            image_data: Encoded image bytes to send inline.
            image_url: URL the server should download the image from.
            timeout: Optional deadline for the call, in seconds.

        Returns:
            NsfwDetectionResponse: The server's classification response.

        Raises:
            ValueError: If both ``image_data`` and ``image_url`` are given.

        """
        if image_data is not None and image_url is not None:
            msg = "image_data and image_url are mutually exclusive"
            raise ValueError(msg)

        request = NsfwDetectionRequest(request_id=request_id)
        if image_data is not None:
            request.image_data = image_data
        elif image_url is not None:
            request.image_url = image_url

        response: NsfwDetectionResponse = await self.stub.DetectNsfw(
            request, timeout=timeout
        )
        return response


def request_from_message(
    message: NsfwDetectionRequest,
) -> ClassificationRequest:
    """Convert a wire ``NsfwDetectionRequest`` into the domain model."""
    source_field = message.WhichOneof("image_source")
    source: ImageSource
    if source_field == "image_data":
        source = InlineImage(data=message.image_data)
    elif source_field == "image_url":
        source = RemoteImage(url=message.image_url)
    else:
        source = NoImageSource()
    return ClassificationRequest(
        request_id=message.request_id, image_source=source
    )


def response_from_result(
    request_id: str, result: ClassificationResult
) -> NsfwDetectionResponse:
    """Convert a classification result into a wire response."""
    return NsfwDetectionResponse(
        request_id=request_id,
        overall_classification=int(result.label),
        scores=[
            DetectionScore(label=int(score.label), score=score.score)
            for score in result.scores
        ],
        model_version=result.model_version,
        error_message=result.error_message,
    )
