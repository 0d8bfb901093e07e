"""Module containing the request input models.

The wire request carries a ``oneof image_source`` with two payload variants.
Here it is represented as a closed union of three frozen dataclasses, with
the absent case spelled out explicitly rather than left as ``None``.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class InlineImage:
    """Image bytes sent inside the request."""

    data: bytes


@dataclass(frozen=True)
class RemoteImage:
    """Image to be fetched from a URL."""

    url: str


@dataclass(frozen=True)
class NoImageSource:
    """The request did not populate any image source."""


ImageSource = InlineImage | RemoteImage | NoImageSource


@dataclass(frozen=True)
class ClassificationRequest:
    """A single detection request.

    Attributes:
        request_id: Opaque identifier echoed back in the response.
        image_source: Where to get the image bytes from.

    """

    request_id: str
    image_source: ImageSource
