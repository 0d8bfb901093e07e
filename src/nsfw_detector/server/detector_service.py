"""The NSFW Detector Service.

Runs the per-request pipeline: acquire the image bytes, decode them,
preprocess and run inference, then assemble a uniform result. Every domain
failure becomes an ``UNKNOWN`` classification with an error message; only a
failure of the worker pool itself fails the gRPC call.
"""

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import Executor
from typing import TypeVar

import grpc
import grpc.aio
import httpx

from nsfw_detector.generated.nsfw_detector_pb2 import (
    NsfwDetectionRequest,
    NsfwDetectionResponse,
)
from nsfw_detector.grpc_wrappers.detector_service import (
    request_from_message,
    response_from_result,
)
from nsfw_detector.server.exceptions import (
    DetectorError,
    ModelUnavailableError,
    WorkerError,
)
from nsfw_detector.server.image_source import acquire_image_bytes
from nsfw_detector.server.model_handle import (
    ModelLoadFailed,
    ModelLoadOutcome,
    NsfwModel,
)
from nsfw_detector.server.models import (
    ClassificationRequest,
    ClassificationResult,
    Prediction,
)
from nsfw_detector.server.preprocessing import decode_image
from nsfw_detector.server.response import failure_result, success_result

ArgT = TypeVar("ArgT")
ResultT = TypeVar("ResultT")


class NsfwDetectorService:
    """gRPC servicer classifying images as normal or unsafe.

    This class owns no resources. The model outcome, worker pool and HTTP
    client are created once by the caller and shared by every request.
    """

    def __init__(
        self,
        model_outcome: ModelLoadOutcome,
        executor: Executor,
        http_client: httpx.AsyncClient,
        *,
        max_image_bytes: int | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            model_outcome: The result of the one-time model load. A failed
                load is reported to every request and never retried.
            executor: Bounded worker pool for decoding and inference.
            http_client: Client used to download remote images.
            max_image_bytes: Largest remote image accepted, in bytes. None
                accepts any size.

        """
        self.logger = logging.getLogger(__name__)
        self.model_outcome = model_outcome
        self.executor = executor
        self.http_client = http_client
        self.max_image_bytes = max_image_bytes

    async def DetectNsfw(  # noqa: N802 - gRPC method name
        self,
        request: NsfwDetectionRequest,
        context: grpc.aio.ServicerContext[
            NsfwDetectionRequest, NsfwDetectionResponse
        ],
    ) -> NsfwDetectionResponse:
        """Handle a ``DetectNsfw`` call.

        Args:
            request: The ``NsfwDetectionRequest`` message.
            context: The call context.

        Returns:
            The ``NsfwDetectionResponse`` message, also for failed requests.

        """
        classification_request = request_from_message(request)
        try:
            result = await self.classify(classification_request)
        except WorkerError as e:
            self.logger.exception(
                "Request %s could not be processed",
                classification_request.request_id,
            )
            await context.abort(grpc.StatusCode.INTERNAL, str(e))
        return response_from_result(classification_request.request_id, result)

    async def classify(
        self, request: ClassificationRequest
    ) -> ClassificationResult:
        """Run the detection pipeline for one request.

        Args:
            request: The request to classify.

        Returns:
            The classification, or an ``UNKNOWN`` result describing the
            first stage that failed.

        Raises:
            WorkerError: If the worker pool could not run a stage.

        """
        self.logger.info(
            "Got a request: %s (%s)",
            request.request_id,
            type(request.image_source).__name__,
        )
        try:
            prediction = await self._predict(request)
        except DetectorError as e:
            result = failure_result(e)
            self.logger.warning(
                "Request %s failed: %s",
                request.request_id,
                result.error_message,
            )
            return result

        result = success_result(prediction)
        self.logger.info(
            "Request %s classified as %s (unsafe=%.4f)",
            request.request_id,
            result.label.name,
            prediction.p_unsafe,
        )
        return result

    async def _predict(self, request: ClassificationRequest) -> Prediction:
        model = self._ready_model()
        image_bytes = await acquire_image_bytes(
            request.image_source,
            self.http_client,
            max_bytes=self.max_image_bytes,
        )
        image = await self._run_in_worker(decode_image, image_bytes)
        return await self._run_in_worker(model.predict, image)

    def _ready_model(self) -> NsfwModel:
        outcome = self.model_outcome
        if isinstance(outcome, ModelLoadFailed):
            # Raise a fresh error so the cached one keeps its traceback
            error = ModelUnavailableError(str(outcome.error))
            raise error from outcome.error
        return outcome.model

    async def _run_in_worker(
        self, func: Callable[[ArgT], ResultT], arg: ArgT
    ) -> ResultT:
        """Run a CPU bound stage on the worker pool.

        Domain errors raised by ``func`` propagate unchanged. Anything else,
        including the pool refusing the work, is a ``WorkerError``.
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self.executor, func, arg)
        except DetectorError:
            raise
        except Exception as e:
            msg = f"Prediction task failed: {e}"
            raise WorkerError(msg) from e
