from prometheus_client import Counter

spec_fetch_total = Counter(
    "picaloco_spec_fetch_total",
    "Outbound OpenAPI spec fetches by outcome",
    ["outcome"],
)

spec_cache_requests_total = Counter(
    "picaloco_spec_cache_requests_total",
    "Spec cache lookups by result (hit/miss)",
    ["result"],
)

fallback_served_total = Counter(
    "picaloco_fallback_served_total",
    "Number of times the placeholder document was served instead of the real spec",
)
