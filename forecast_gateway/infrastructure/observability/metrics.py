"""Prometheus metrics for monitoring forecasts and transaction store health"""

from prometheus_client import Counter, Histogram

# Forecast metrics
forecast_counter = Counter(
    "forecast_computed_total",
    "Total account forecasts computed",
    ["window"],  # pay_period | month_end
)

lowest_balance_bucket_counter = Counter(
    "forecast_lowest_balance_bucket_total",
    "Projected lowest balances by bucket",
    ["bucket"],  # negative, $0-$100, $100-$500, $500+
)

forecast_duration_histogram = Histogram(
    "forecast_duration_seconds",
    "Time to compute an account forecast",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

forecast_not_found_counter = Counter(
    "forecast_account_not_found_total",
    "Forecasts requested for missing or deleted accounts",
)

# Transaction store metrics
transaction_store_failures_counter = Counter(
    "transaction_store_failures_total",
    "Failed transaction store calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_forecast(has_paycheck: bool, lowest_balance: float) -> None:
    """Record forecast metrics for monitoring projected overdrafts"""
    window = "pay_period" if has_paycheck else "month_end"
    forecast_counter.labels(window=window).inc()

    if lowest_balance < 0:
        bucket = "negative"
    elif lowest_balance <= 100:
        bucket = "$0-$100"
    elif lowest_balance <= 500:
        bucket = "$100-$500"
    else:
        bucket = "$500+"

    lowest_balance_bucket_counter.labels(bucket=bucket).inc()
