"""Global configuration and constants for the temperature heatmap."""

from __future__ import annotations

import os
from typing import Final

DATASET_URL: Final = os.environ.get(
    "HEATMAP_DATASET_URL",
    "https://raw.githubusercontent.com/freeCodeCamp/ProjectReferenceData/master/global-temperature.json",
)
DEFAULT_USER_AGENT: Final = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/115.0 Safari/537.36"
)
DEFAULT_TIMEOUT: Final = 15  # seconds
DEFAULT_RETRIES: Final = 3
DEFAULT_BACKOFF_FACTOR: Final = 0.6
DATA_DIR: Final = os.environ.get("HEATMAP_DATA_DIR", "data")
CACHE_TTL: Final = 24 * 3600  # dataset is static; one day is plenty

# Out-of-domain scale lookups raise instead of clamping (development / tests)
STRICT_SCALES: Final = os.environ.get("HEATMAP_STRICT_SCALES", "0").lower() in {"1", "true", "yes"}

LOG_LEVEL: Final = os.environ.get("HEATMAP_LOG_LEVEL", "INFO").upper()
