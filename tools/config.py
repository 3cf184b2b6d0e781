"""Tool configuration from environment variables."""

import os

ES_HOST: str = os.getenv("ES_HOST", "localhost")
ES_PORT: int = int(os.getenv("ES_PORT", "9200"))
KIBANA_INDEX: str = os.getenv("KIBANA_INDEX", ".kibana")
HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "5"))
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Batched id lookups are a single page; there is no pagination past this.
SEARCH_PAGE_SIZE = 1000
