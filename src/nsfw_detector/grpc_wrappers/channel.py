"""Channel creation utilities for NsfwDetector clients."""

import grpc
from grpc.aio import Channel

from nsfw_detector.server.exceptions import InvalidHostError


def create_channel(host: str, *, secure: bool = False) -> Channel:
    """Create a gRPC channel to an NsfwDetector server.

    Args:
        host: The host address to connect to, e.g. ``localhost:50051``.
        secure: Whether to use TLS with the default root certificates.

    Returns:
        A gRPC channel (either secure or insecure)

    Raises:
        InvalidHostError: If host is empty

    """
    if not host:
        raise InvalidHostError(InvalidHostError.default_message)

    if secure:
        return grpc.aio.secure_channel(host, grpc.ssl_channel_credentials())
    return grpc.aio.insecure_channel(host)
