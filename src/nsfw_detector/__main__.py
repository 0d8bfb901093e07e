"""Allow running the server with ``python -m nsfw_detector``."""

import sys

from nsfw_detector.main import main

sys.exit(main())
