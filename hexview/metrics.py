from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

# Transition and rendering counters, scraped through metrics_text()
TRANSITIONS_TOTAL = Counter(
    "hexview_transitions_total",
    "Count of sequenced view transitions by kind and outcome",
    ["kind", "outcome"],
)

TRANSITION_LATENCY = Histogram(
    "hexview_transition_latency_seconds",
    "Duration of sequenced view transitions, queue wait excluded",
    ["kind"],
)

SETTLE_TIMEOUTS = Counter(
    "hexview_settle_timeouts_total",
    "Settle waits that fell back to their timeout instead of a transition signal",
    ["signal"],
)

REDRAWS_TOTAL = Counter(
    "hexview_redraws_total",
    "Batched transform flushes delivered to the renderer",
)


def metrics_text() -> tuple[bytes, str]:
    """Return the exposition payload and its content type for a scrape handler."""
    return generate_latest(), CONTENT_TYPE_LATEST
