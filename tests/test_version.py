"""Tests for version information."""

import importlib
from unittest import mock

import nsfw_detector.version
from nsfw_detector.version import __version__


def test_version_from_metadata() -> None:
    """The version is read from the installed distribution's metadata."""
    with mock.patch("importlib.metadata.version") as mock_version:
        mock_version.return_value = "9.8.7"

        importlib.reload(nsfw_detector.version)

    mock_version.assert_called_once_with("nsfw_detector")
    assert nsfw_detector.version.__version__ == "9.8.7"
    importlib.reload(nsfw_detector.version)


def test_version_exists() -> None:
    assert nsfw_detector.version.__version__ == __version__
    assert __version__
