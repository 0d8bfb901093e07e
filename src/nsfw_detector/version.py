"""Single point of truth for the version of the nsfw_detector package."""

import importlib.metadata

__version__ = importlib.metadata.version("nsfw_detector")
