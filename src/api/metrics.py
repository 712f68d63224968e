from prometheus_client import Counter, Histogram, Gauge, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "mindlyst_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "mindlyst_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

TASKS_EXTRACTED_TOTAL = get_or_create_metric(
    "mindlyst_tasks_extracted_total", "Total candidate tasks extracted from text", Counter
)

TASK_SUBMISSIONS_TOTAL = get_or_create_metric(
    "mindlyst_task_submissions_total",
    "Tasks sent to Google Tasks",
    Counter,
    labelnames=["mode"],
)

PENDING_SUBMISSIONS = get_or_create_metric(
    "mindlyst_pending_submissions", "Tracked tasks currently pending", Gauge
)
