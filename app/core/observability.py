import logging
import sys

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "pinterval_api_requests_total",
    "Total API requests",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "pinterval_api_request_latency_seconds",
    "API request latency",
    ["method", "path"],
)

UPSTREAM_COUNT = Counter(
    "pinterval_upstream_requests_total",
    "Outbound calls to Pinterest and proxied image hosts",
    ["operation", "outcome"],
)

UPSTREAM_LATENCY = Histogram(
    "pinterval_upstream_latency_seconds",
    "Outbound call latency",
    ["operation"],
)

BOARD_FAILURES = Counter(
    "pinterval_board_fetch_failures_total",
    "Boards skipped during pin aggregation",
)

SEARCH_CACHE = Counter(
    "pinterval_search_cache_total",
    "Search cache lookups",
    ["result"],
)

PROXIED_IMAGES = Counter(
    "pinterval_image_proxy_total",
    "Image proxy requests",
    ["outcome"],
)


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
