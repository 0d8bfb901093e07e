"""End-to-end tests against a real gRPC server on localhost."""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from concurrent.futures import Executor, ThreadPoolExecutor
from pathlib import Path
from unittest import mock

import grpc
import grpc.aio
import httpx
import pytest
import pytest_asyncio
from google.protobuf import descriptor_pb2
from grpc_reflection.v1alpha import (
    reflection,
    reflection_pb2,
    reflection_pb2_grpc,
)

from nsfw_detector.generated.nsfw_detector_pb2 import ClassificationLabel
from nsfw_detector.grpc_wrappers.channel import create_channel
from nsfw_detector.grpc_wrappers.detector_service import (
    SERVICE_NAME,
    NsfwDetectorClient,
)
from nsfw_detector.main import create_server, main, serve
from nsfw_detector.server.detector_service import NsfwDetectorService
from nsfw_detector.server.model_handle import (
    ModelLoadFailed,
    ModelLoadOutcome,
    ModelReady,
)
from nsfw_detector.server.server_options import PORT_ENV, ServerOptions
from tests.utils.image_generation import (
    BLACK,
    create_random_image,
    create_test_image,
)
from tests.utils.image_server import (
    IMAGE_HOST,
    MISSING_IMAGE_PATH,
    RED_IMAGE_PATH,
)
from tests.utils.model_artifacts import TEST_MODEL_VERSION

UNKNOWN = ClassificationLabel.CLASSIFICATION_LABEL_UNKNOWN
NORMAL = ClassificationLabel.CLASSIFICATION_LABEL_NORMAL
UNSAFE = ClassificationLabel.CLASSIFICATION_LABEL_UNSAFE

StartServer = Callable[
    [ModelLoadOutcome, Executor], Awaitable[NsfwDetectorClient]
]


@pytest_asyncio.fixture
async def start_server(
    http_client: httpx.AsyncClient,
) -> AsyncIterator[StartServer]:
    """Start detector servers on free localhost ports.

    Yields a coroutine function that serves the given model outcome and
    returns a client connected to it. Every server and channel is shut down
    when the test finishes.
    """
    servers: list[grpc.aio.Server] = []
    channels: list[grpc.aio.Channel] = []

    async def start(
        model_outcome: ModelLoadOutcome, executor: Executor
    ) -> NsfwDetectorClient:
        service = NsfwDetectorService(model_outcome, executor, http_client)
        server, port = create_server(service, "localhost:0")
        await server.start()
        servers.append(server)

        channel = create_channel(f"localhost:{port}")
        channels.append(channel)
        return NsfwDetectorClient(channel)

    yield start

    for channel in channels:
        await channel.close()
    for server in servers:
        await server.stop(None)


@pytest.mark.asyncio
@pytest.mark.functional
async def test_classify_inline_image(
    start_server: StartServer,
    model_ready: ModelReady,
    executor: ThreadPoolExecutor,
) -> None:
    client = await start_server(model_ready, executor)

    response = await client.detect_nsfw(
        "inline-red", image_data=create_test_image(), timeout=10
    )

    assert response.request_id == "inline-red"
    assert response.overall_classification == UNSAFE
    assert [score.label for score in response.scores] == [NORMAL, UNSAFE]
    assert sum(s.score for s in response.scores) == pytest.approx(1.0)
    assert response.model_version == TEST_MODEL_VERSION
    assert response.error_message == ""


@pytest.mark.asyncio
@pytest.mark.functional
async def test_classify_remote_image(
    start_server: StartServer,
    model_ready: ModelReady,
    executor: ThreadPoolExecutor,
) -> None:
    client = await start_server(model_ready, executor)

    response = await client.detect_nsfw(
        "remote", image_url=IMAGE_HOST + RED_IMAGE_PATH, timeout=10
    )

    assert response.overall_classification == UNSAFE
    assert response.error_message == ""


@pytest.mark.asyncio
@pytest.mark.functional
@pytest.mark.parametrize(
    ("image_data", "image_url", "message"),
    [
        (b"", None, "Received empty image_data."),
        (None, "", "Received empty image_url."),
        (None, None, "No image_source provided in the request."),
    ],
)
async def test_missing_input_is_reported_in_band(
    start_server: StartServer,
    model_ready: ModelReady,
    executor: ThreadPoolExecutor,
    image_data: bytes | None,
    image_url: str | None,
    message: str,
) -> None:
    client = await start_server(model_ready, executor)

    response = await client.detect_nsfw(
        "missing", image_data=image_data, image_url=image_url, timeout=10
    )

    assert response.request_id == "missing"
    assert response.overall_classification == UNKNOWN
    assert len(response.scores) == 0
    assert response.model_version == "unknown"
    assert response.error_message == message


@pytest.mark.asyncio
@pytest.mark.functional
async def test_invalid_image_and_fetch_failure(
    start_server: StartServer,
    model_ready: ModelReady,
    executor: ThreadPoolExecutor,
) -> None:
    client = await start_server(model_ready, executor)

    invalid = await client.detect_nsfw(
        "invalid", image_data=b"this is not a valid image file", timeout=10
    )
    missing = await client.detect_nsfw(
        "missing", image_url=IMAGE_HOST + MISSING_IMAGE_PATH, timeout=10
    )

    assert invalid.overall_classification == UNKNOWN
    assert invalid.error_message.startswith("Failed to decode image: ")
    assert missing.overall_classification == UNKNOWN
    assert missing.error_message.startswith("Failed to fetch image from URL")


@pytest.mark.asyncio
@pytest.mark.functional
async def test_concurrent_requests(
    start_server: StartServer,
    model_ready: ModelReady,
    executor: ThreadPoolExecutor,
) -> None:
    client = await start_server(model_ready, executor)
    images = {
        "red": create_test_image(),
        "black": create_test_image(color=BLACK),
        "broken": b"\x89PNG\r\n\x1a\n",
        **{
            f"random-{seed}": create_random_image(64, 48, seed=seed)
            for seed in range(5)
        },
    }

    responses = await asyncio.gather(
        *(
            client.detect_nsfw(request_id, image_data=data, timeout=30)
            for request_id, data in images.items()
        )
    )

    by_id = {response.request_id: response for response in responses}
    assert set(by_id) == set(images)
    assert by_id["red"].overall_classification == UNSAFE
    assert by_id["black"].overall_classification == NORMAL
    assert by_id["broken"].overall_classification == UNKNOWN
    for seed in range(5):
        assert by_id[f"random-{seed}"].error_message == ""


@pytest.mark.asyncio
@pytest.mark.functional
async def test_model_load_failure_is_served(
    start_server: StartServer,
    model_failed: ModelLoadFailed,
    executor: ThreadPoolExecutor,
) -> None:
    client = await start_server(model_failed, executor)

    responses = [
        await client.detect_nsfw(
            f"req-{i}", image_data=create_test_image(), timeout=10
        )
        for i in range(2)
    ]

    for response in responses:
        assert response.overall_classification == UNKNOWN
        assert response.model_version == "unknown"
        assert response.error_message.startswith(
            "Model loading failed: Model file not found: "
        )
    assert responses[0].error_message == responses[1].error_message


@pytest.mark.asyncio
@pytest.mark.functional
async def test_worker_failure_is_an_internal_error(
    start_server: StartServer, model_ready: ModelReady
) -> None:
    pool = ThreadPoolExecutor(max_workers=1)
    pool.shutdown()
    client = await start_server(model_ready, pool)

    with pytest.raises(grpc.aio.AioRpcError) as exc_info:
        _ = await client.detect_nsfw(
            "doomed", image_data=create_test_image(), timeout=10
        )

    assert exc_info.value.code() == grpc.StatusCode.INTERNAL
    assert "Prediction task failed" in (exc_info.value.details() or "")


@pytest.mark.asyncio
@pytest.mark.functional
async def test_serve_shuts_down_when_cancelled(model_dir: Path) -> None:
    options = ServerOptions(
        host="localhost", port=0, model_dir=model_dir, max_workers=1
    )

    task = asyncio.create_task(serve(options))
    await asyncio.sleep(0.5)
    assert not task.done()
    _ = task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.functional
def test_main_rejects_invalid_configuration(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv(PORT_ENV, "not-a-port")

    with (
        mock.patch("nsfw_detector.server.server_options.load_dotenv"),
        mock.patch("nsfw_detector.main.serve") as serve_mock,
    ):
        assert main() == 1

    serve_mock.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.functional
async def test_server_reflection_describes_detector(
    model_ready: ModelReady,
    executor: ThreadPoolExecutor,
    http_client: httpx.AsyncClient,
) -> None:
    service = NsfwDetectorService(model_ready, executor, http_client)
    server, port = create_server(service, "localhost:0")
    await server.start()
    requests = [
        reflection_pb2.ServerReflectionRequest(list_services=""),
        reflection_pb2.ServerReflectionRequest(
            file_containing_symbol=SERVICE_NAME
        ),
    ]

    try:
        async with create_channel(f"localhost:{port}") as channel:
            stub = reflection_pb2_grpc.ServerReflectionStub(channel)
            call = stub.ServerReflectionInfo(iter(requests))
            listing, described = [response async for response in call]
    finally:
        await server.stop(None)

    assert {s.name for s in listing.list_services_response.service} == {
        SERVICE_NAME,
        reflection.SERVICE_NAME,
    }
    (serialized,) = described.file_descriptor_response.file_descriptor_proto
    file_proto = descriptor_pb2.FileDescriptorProto.FromString(serialized)
    assert file_proto.name == "nsfw_detector.proto"
    assert [method.name for method in file_proto.service[0].method] == [
        "DetectNsfw"
    ]
