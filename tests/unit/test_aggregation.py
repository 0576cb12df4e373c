"""Unit tests for investor profit & capital aggregation"""

import pytest
from datetime import date, datetime
from armada_ledger.domain.models import (
    Investor,
    InvestorSnapshot,
    Payment,
    ProfitSharing,
    Transaction,
    Unit,
)
from armada_ledger.domain.aggregation import (
    build_investor_dashboard,
    compute_investor_stats,
    monthly_income,
    total_invested,
    total_profit,
    transaction_capital,
)


def make_transaction(txn_id="t1", buy_price=100_000, capital=None, profit=None, status="ON_PROCESS"):
    profit_sharing = None
    if profit is not None:
        profit_sharing = ProfitSharing(
            total_capital_investor=buy_price,
            total_capital_manager=0,
            total_capital=buy_price,
            net_margin=profit,
            investor_share_percentage=40,
            manager_share_percentage=60,
            investor_profit_amount=profit,
            manager_profit_amount=0,
        )
    return Transaction(
        id=txn_id,
        unit_id="u1",
        transaction_code=f"TRX-{txn_id}",
        status=status,
        buy_price=buy_price,
        initial_investor_capital=capital,
        profit_sharing=profit_sharing,
    )


def make_unit(unit_id="u1", status="AVAILABLE", transactions=None):
    return Unit(
        id=unit_id,
        investor_id="inv1",
        name="Avanza",
        code=f"UNT-{unit_id}",
        plate_number="B 1 XYZ",
        status=status,
        transactions=transactions or [],
    )


def make_snapshot(units=(), transactions=(), payments=(), total_units_count=None):
    units = list(units)
    return InvestorSnapshot(
        investor=Investor(id="inv1", name="Budi", margin_percentage=40),
        active_units=[u for u in units if u.status == "AVAILABLE"],
        payments=list(payments),
        transactions=list(transactions),
        units=units,
        total_units_count=len(units) if total_units_count is None else total_units_count,
    )


class FakeSource:
    def __init__(self, snapshot):
        self.snapshot = snapshot
        self.requested = []

    def load_investor_snapshot(self, investor_id):
        self.requested.append(investor_id)
        return self.snapshot


def test_investor_without_units_has_zero_stats():
    """Empty investor: every figure is zero"""
    dashboard = build_investor_dashboard(make_snapshot())

    assert dashboard.stats.total_invested == 0
    assert dashboard.stats.total_profit == 0
    assert dashboard.stats.total_received == 0
    assert dashboard.stats.active_units_count == 0
    assert dashboard.stats.total_units_count == 0
    assert dashboard.recent_transactions == []


def test_capital_uses_buy_price_without_override():
    txn = make_transaction(buy_price=100_000)
    dashboard = build_investor_dashboard(make_snapshot(units=[make_unit(transactions=[txn])]))

    assert dashboard.stats.total_invested == 100_000


def test_capital_override_takes_precedence():
    """initial_investor_capital wins over buy_price"""
    txn = make_transaction(buy_price=100_000, capital=80_000)
    dashboard = build_investor_dashboard(make_snapshot(units=[make_unit(transactions=[txn])]))

    assert dashboard.stats.total_invested == 80_000


def test_zero_capital_override_is_respected():
    """An explicit 0 override is a value, not a missing one"""
    assert transaction_capital(make_transaction(buy_price=100_000, capital=0)) == 0


@pytest.mark.parametrize("status", ["AVAILABLE", "SOLD", "MAINTENANCE"])
def test_unit_without_transaction_contributes_no_capital(status):
    units = [
        make_unit("u1", status=status),
        make_unit("u2", transactions=[make_transaction(buy_price=50_000)]),
    ]
    assert total_invested(units) == 50_000


def test_only_first_transaction_of_unit_counts_as_capital():
    unit = make_unit(transactions=[
        make_transaction("t1", buy_price=100_000),
        make_transaction("t2", buy_price=999_999),
    ])
    assert total_invested([unit]) == 100_000


def test_positive_profit_is_summed():
    transactions = [
        make_transaction("t1", profit=5_000, status="COMPLETED"),
        make_transaction("t2", profit=2_500, status="COMPLETED"),
    ]
    assert total_profit(transactions) == 7_500


def test_non_positive_profit_is_excluded_not_clamped():
    """A negative amount does not reduce the total; it is dropped"""
    transactions = [
        make_transaction("t1", profit=5_000, status="COMPLETED"),
        make_transaction("t2", profit=0, status="COMPLETED"),
        make_transaction("t3", profit=-3_000, status="COMPLETED"),
        make_transaction("t4"),  # no profit sharing yet
    ]
    assert total_profit(transactions) == 5_000


def test_active_count_only_available_units():
    """SOLD and MAINTENANCE units drop out of the active count but keep their capital"""
    units = [
        make_unit("u1", "AVAILABLE", [make_transaction("t1", buy_price=10_000)]),
        make_unit("u2", "SOLD", [make_transaction("t2", buy_price=20_000)]),
        make_unit("u3", "MAINTENANCE", [make_transaction("t3", buy_price=30_000)]),
    ]
    dashboard = build_investor_dashboard(make_snapshot(units=units))

    assert dashboard.stats.active_units_count == 1
    assert dashboard.stats.total_units_count == 3
    assert dashboard.stats.total_invested == 60_000


def test_total_units_count_comes_from_snapshot_count():
    """The unit count is the separately queried figure, not len(units)"""
    dashboard = build_investor_dashboard(make_snapshot(units=[make_unit()], total_units_count=4))
    assert dashboard.stats.total_units_count == 4


def test_total_received_sums_all_payments():
    payments = [
        Payment(amount=1_000, payment_date=datetime(2024, 1, 5)),
        Payment(amount=2_500.5, payment_date=datetime(2025, 3, 1)),
    ]
    dashboard = build_investor_dashboard(make_snapshot(payments=payments), today=date(2025, 3, 10))

    assert dashboard.stats.total_received == 3_500.5


def test_recent_transactions_capped_at_five_in_load_order():
    transactions = [make_transaction(f"t{i}") for i in range(8)]
    dashboard = build_investor_dashboard(make_snapshot(transactions=transactions))

    assert len(dashboard.recent_transactions) == 5
    assert [t.id for t in dashboard.recent_transactions] == ["t0", "t1", "t2", "t3", "t4"]


def test_monthly_income_window_zero_filled():
    """Last six months, oldest first; older payouts fall outside the window"""
    payments = [
        Payment(amount=1_000, payment_date=datetime(2025, 3, 2)),
        Payment(amount=500, payment_date=datetime(2025, 3, 28)),
        Payment(amount=700, payment_date=datetime(2024, 11, 15)),
        Payment(amount=9_999, payment_date=datetime(2024, 6, 1)),
    ]
    months = monthly_income(payments, date(2025, 3, 10), 6)

    assert [(m.year, m.month) for m in months] == [
        (2024, 10), (2024, 11), (2024, 12), (2025, 1), (2025, 2), (2025, 3),
    ]
    assert [m.income for m in months] == [0, 700, 0, 0, 0, 1_500]


def test_compute_returns_none_when_investor_missing():
    """Missing investor is the 'not linked' state, not an exception"""
    source = FakeSource(None)
    assert compute_investor_stats("missing", source) is None
    assert source.requested == ["missing"]


def test_compute_passes_investor_id_to_source():
    txn = make_transaction(buy_price=100_000, profit=5_000, status="COMPLETED")
    source = FakeSource(make_snapshot(units=[make_unit(transactions=[txn])], transactions=[txn]))

    dashboard = compute_investor_stats("inv1", source)

    assert source.requested == ["inv1"]
    assert dashboard.investor.name == "Budi"
    assert dashboard.stats.total_invested == 100_000
    assert dashboard.stats.total_profit == 5_000
