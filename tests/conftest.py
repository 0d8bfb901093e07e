from collections.abc import AsyncIterator, Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from nsfw_detector.server.model_handle import (
    ModelLoadFailed,
    ModelReady,
    NsfwModel,
    load_model,
)
from tests.utils.image_server import image_server
from tests.utils.model_artifacts import write_model_dir


@pytest.fixture
def model_dir(tmp_path: Path) -> Path:
    return write_model_dir(tmp_path / "model")


@pytest.fixture
def nsfw_model(model_dir: Path) -> NsfwModel:
    return NsfwModel.from_directory(model_dir)


@pytest.fixture
def model_ready(model_dir: Path) -> ModelReady:
    outcome = load_model(model_dir)
    assert isinstance(outcome, ModelReady)
    return outcome


@pytest.fixture
def model_failed(tmp_path: Path) -> ModelLoadFailed:
    outcome = load_model(tmp_path / "does-not-exist")
    assert isinstance(outcome, ModelLoadFailed)
    return outcome


@pytest.fixture
def executor() -> Iterator[ThreadPoolExecutor]:
    pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="test")
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def image_handler() -> Callable[[httpx.Request], httpx.Response]:
    return image_server


@pytest_asyncio.fixture
async def http_client(
    image_handler: Callable[[httpx.Request], httpx.Response],
) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(image_handler), follow_redirects=True
    ) as client:
        yield client
