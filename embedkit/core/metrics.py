# File: embedkit/core/metrics.py
from prometheus_client import Counter, Histogram

EMBED_REQUESTS_TOTAL = Counter(
    "embedkit_embed_requests_total",
    "Total number of batch embedding requests, by outcome.",
    ["provider", "status"]
)

EMBED_REQUEST_DURATION_SECONDS = Histogram(
    "embedkit_embed_request_duration_seconds",
    "Time taken to embed a batch of texts through the pipeline.",
    ["provider"],
    buckets=[0.1, 0.5, 1, 2, 5, 10, 20, 30]
)

TEXTS_EMBEDDED_TOTAL = Counter(
    "embedkit_texts_embedded_total",
    "Total number of input texts submitted for embedding.",
    ["provider"]
)

TOKENS_CONSUMED_TOTAL = Counter(
    "embedkit_tokens_consumed_total",
    "Tokens reported by embedding backends.",
    ["provider", "kind"]
)

PROVIDER_API_DURATION_SECONDS = Histogram(
    "embedkit_provider_api_duration_seconds",
    "Duration of calls to embedding backend APIs.",
    ["provider", "model_name"]
)

PROVIDER_API_ERRORS_TOTAL = Counter(
    "embedkit_provider_api_errors_total",
    "Total number of errors from embedding backend APIs.",
    ["provider", "error_type"]
)
