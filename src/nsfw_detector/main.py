"""Entry point running the NSFW detector gRPC server."""

import asyncio
import logging
import sys
from concurrent.futures import ThreadPoolExecutor

import grpc
import grpc.aio
import httpx
from grpc_reflection.v1alpha import reflection

from nsfw_detector.generated.nsfw_detector_pb2_grpc import (
    add_NsfwDetectorServicer_to_server,
)
from nsfw_detector.grpc_wrappers.detector_service import SERVICE_NAME
from nsfw_detector.server.consts import DEFAULT_LOG_LEVEL
from nsfw_detector.server.detector_service import NsfwDetectorService
from nsfw_detector.server.exceptions import ConfigurationError
from nsfw_detector.server.model_handle import load_model
from nsfw_detector.server.server_options import ServerOptions
from nsfw_detector.version import __version__

SHUTDOWN_GRACE_SECONDS = 5.0


def create_server(
    service: NsfwDetectorService, address: str
) -> tuple[grpc.aio.Server, int]:
    """Create a gRPC server exposing the detector service.

    Server reflection is enabled as well, so tools such as grpcurl can list
    and describe the service without a local copy of the schema.

    Args:
        service: The servicer to register.
        address: The ``host:port`` address to bind. Port 0 picks a free port.

    Returns:
        The (not yet started) server and the port it is bound to.

    """
    server = grpc.aio.server()
    add_NsfwDetectorServicer_to_server(service, server)
    reflection.enable_server_reflection(
        (SERVICE_NAME, reflection.SERVICE_NAME), server
    )
    port = server.add_insecure_port(address)
    return server, port


async def serve(options: ServerOptions) -> None:
    """Load the model once and serve requests until terminated."""
    logger = logging.getLogger(__name__)
    logger.info("Starting NSFW detector %s", __version__)

    model_outcome = load_model(
        options.model_dir, intra_op_threads=options.inference_threads
    )
    executor = ThreadPoolExecutor(
        max_workers=options.worker_count, thread_name_prefix="predict"
    )
    http_client = httpx.AsyncClient(
        timeout=options.fetch_timeout, follow_redirects=True
    )
    service = NsfwDetectorService(
        model_outcome,
        executor,
        http_client,
        max_image_bytes=options.image_size_limit,
    )
    server, port = create_server(service, options.address)

    try:
        await server.start()
        logger.info(
            "NsfwDetectorServer listening on %s:%d (%d workers)",
            options.host,
            port,
            options.worker_count,
        )
        await server.wait_for_termination()
    finally:
        await server.stop(SHUTDOWN_GRACE_SECONDS)
        await http_client.aclose()
        executor.shutdown(wait=True)
        logger.info("NsfwDetectorServer stopped")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def main() -> int:
    """Run the server with options taken from the environment."""
    logger = logging.getLogger(__name__)

    try:
        options = ServerOptions.from_env()
    except ConfigurationError:
        _configure_logging(DEFAULT_LOG_LEVEL)
        logger.exception("Invalid configuration")
        return 1

    _configure_logging(options.log_level)
    try:
        asyncio.run(serve(options))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
