"""Profit & capital aggregation for the investor dashboard"""

from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Protocol, Tuple
from armada_ledger.domain.models import (
    InvestorDashboard,
    InvestorSnapshot,
    InvestorStats,
    MonthlyIncome,
    Payment,
    Transaction,
    Unit,
)
from armada_ledger.utils.date_utils import last_n_months


class InvestorSnapshotSource(Protocol):
    """Anything able to load an investor's records by id"""

    def load_investor_snapshot(self, investor_id) -> Optional[InvestorSnapshot]:
        ...


def transaction_capital(transaction: Transaction) -> float:
    """Capital tied up by the investor: explicit override wins over buy price"""
    if transaction.initial_investor_capital is not None:
        return transaction.initial_investor_capital
    return transaction.buy_price


def total_invested(units: List[Unit]) -> float:
    # Only the first loaded transaction of a unit counts; units without one add nothing
    total = 0
    for unit in units:
        if unit.transactions:
            total += transaction_capital(unit.transactions[0])
    return total


def total_profit(transactions: List[Transaction]) -> float:
    # Non-positive amounts are left out of the sum entirely
    total = 0
    for txn in transactions:
        if txn.profit_sharing and txn.profit_sharing.investor_profit_amount > 0:
            total += txn.profit_sharing.investor_profit_amount
    return total


def monthly_income(payments: List[Payment], today: date, months: int) -> List[MonthlyIncome]:
    """Bucket payouts into the last `months` calendar months, zero-filled"""
    window = last_n_months(today, months)
    buckets: Dict[Tuple[int, int], float] = defaultdict(float)
    for payment in payments:
        key = (payment.payment_date.year, payment.payment_date.month)
        if key in window:
            buckets[key] += payment.amount
    return [MonthlyIncome(year=y, month=m, income=buckets.get((y, m), 0)) for y, m in window]


def build_investor_dashboard(
    snapshot: InvestorSnapshot,
    recent_limit: int = 5,
    today: date | None = None,
    income_months: int = 6,
) -> InvestorDashboard:
    """
    Reduce an investor snapshot to dashboard statistics.

    Pure: no I/O, no mutation of the snapshot.

    - total_invested: capital of each unit's first transaction
    - total_profit: strictly positive investor profit amounts only
    - total_received: every payout to the investor
    - active_units_count: AVAILABLE units; total_units_count: separate count
    - recent_transactions: first `recent_limit` transactions in load order
    """
    if today is None:
        today = date.today()

    stats = InvestorStats(
        total_invested=total_invested(snapshot.units),
        total_profit=total_profit(snapshot.transactions),
        total_received=sum(p.amount for p in snapshot.payments),
        active_units_count=len(snapshot.active_units),
        total_units_count=snapshot.total_units_count,
    )

    return InvestorDashboard(
        investor=snapshot.investor,
        stats=stats,
        recent_transactions=snapshot.transactions[:recent_limit],
        monthly_income=monthly_income(snapshot.payments, today, income_months),
    )


def compute_investor_stats(
    investor_id,
    source: InvestorSnapshotSource,
    recent_limit: int = 5,
    today: date | None = None,
    income_months: int = 6,
) -> Optional[InvestorDashboard]:
    """
    Main entry point: load an investor's records and aggregate them.

    Returns None when no investor matches `investor_id` (the "not linked"
    dashboard state). Storage errors propagate unchanged.
    """
    snapshot = source.load_investor_snapshot(investor_id)
    if snapshot is None:
        return None
    return build_investor_dashboard(snapshot, recent_limit=recent_limit, today=today, income_months=income_months)
