"""Prometheus metrics for monitoring sales, profit distribution and dashboard usage"""

from prometheus_client import Counter, Histogram

# Sale metrics
sale_counter = Counter(
    "armada_sales_total",
    "Transactions finalized",
    ["profit_status"],  # PROFIT | LOSS | BREAK_EVEN
)

investor_profit_counter = Counter(
    "armada_investor_profit_total",
    "Investor profit amounts recorded at sale time",
)

manager_profit_counter = Counter(
    "armada_manager_profit_total",
    "Manager profit amounts recorded at sale time",
)

# Dashboard metrics
dashboard_counter = Counter(
    "armada_investor_dashboard_total",
    "Investor dashboard lookups",
    ["outcome"],  # found | not_linked
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_sale(profit_status: str, investor_profit_amount: float, manager_profit_amount: float) -> None:
    """Record sale outcome and the profit amounts distributed"""
    sale_counter.labels(profit_status=profit_status).inc()
    # Counters only move forward; losses record no profit
    if investor_profit_amount > 0:
        investor_profit_counter.inc(investor_profit_amount)
    if manager_profit_amount > 0:
        manager_profit_counter.inc(manager_profit_amount)


def record_dashboard(linked: bool) -> None:
    dashboard_counter.labels(outcome="found" if linked else "not_linked").inc()
