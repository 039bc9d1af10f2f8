from prometheus_fastapi_instrumentator import Instrumentator, metrics

instrumentator = Instrumentator(
    should_ignore_untemplated=True,      # /invoices/abc → /invoices/{invoice_id}
    excluded_handlers=["/metrics", "/api/v1/health"],
    should_instrument_requests_inprogress=True,
    should_group_status_codes=False,
)

# processor round trips dominate payment latency, so the low-res buckets reach 10s
instrumentator.add(metrics.default(latency_lowr_buckets=(0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10)))
