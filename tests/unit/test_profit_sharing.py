"""Unit tests for profit-sharing calculation"""

import pytest
from armada_ledger.domain.models import Cost
from armada_ledger.domain.profit_sharing import (
    calculate_completion_split,
    calculate_profit_sharing,
    completion_shares,
    determine_payment_status,
    investor_should_receive,
    recalculate_shares,
    validate_share_split,
)
from armada_ledger.domain.exceptions import InvalidShareSplitError


def test_profit_split_with_costs_on_both_sides():
    """Investor costs raise investor capital; manager costs form manager capital"""
    costs = [
        Cost(cost_type="REPAIR", payer="INVESTOR", amount=5_000),
        Cost(cost_type="TRANSPORT", payer="MANAGER", amount=2_000),
    ]
    split = calculate_profit_sharing(100_000, costs, 127_000, 40, 60)

    assert split.total_capital_investor == 105_000
    assert split.total_capital_manager == 2_000
    assert split.total_capital == 107_000
    assert split.net_margin == 20_000
    assert split.profit_status == "PROFIT"
    assert split.investor_profit_amount == pytest.approx(8_000)
    assert split.manager_profit_amount == pytest.approx(12_000)


def test_loss_shares_nothing():
    split = calculate_profit_sharing(100_000, [], 90_000, 40, 60)

    assert split.net_margin == -10_000
    assert split.profit_status == "LOSS"
    assert split.investor_profit_amount == 0
    assert split.manager_profit_amount == 0


def test_break_even():
    split = calculate_profit_sharing(100_000, [Cost("GAS", "INVESTOR", 1_000)], 101_000, 50, 50)

    assert split.net_margin == 0
    assert split.profit_status == "BREAK_EVEN"
    assert split.investor_profit_amount == 0


def test_recalculate_shares():
    assert recalculate_shares(10_000, 70, 30) == (pytest.approx(7_000), pytest.approx(3_000))
    assert recalculate_shares(-5_000, 70, 30) == (0, 0)


@pytest.mark.parametrize("investor_pct,manager_pct", [(40, 50), (-10, 110), (101, -1)])
def test_invalid_share_split(investor_pct, manager_pct):
    with pytest.raises(InvalidShareSplitError):
        validate_share_split(investor_pct, manager_pct)


def test_valid_share_split():
    validate_share_split(40, 60)
    validate_share_split(0, 100)


def test_payment_status():
    """Remaining balance within tolerance counts as paid"""
    assert determine_payment_status(10_000, 0) == "UNPAID"
    assert determine_payment_status(10_000, 4_000) == "PARTIAL"
    assert determine_payment_status(10_000, 9_950) == "PAID"
    assert determine_payment_status(10_000, 10_000) == "PAID"
    assert determine_payment_status(0, 0) == "PAID"


def test_investor_should_receive():
    assert investor_should_receive(100_000, 5_000, 8_000) == 103_000


def test_completion_shares_default_to_investor_margin():
    assert completion_shares(30) == (30, 70)
    assert completion_shares(None) == (50, 50)
    assert completion_shares(30, investor_pct=45) == (45, 55)
    assert completion_shares(30, investor_pct=45, manager_pct=50) == (45, 50)


def test_completion_split_uses_initial_capital():
    costs = [
        Cost(cost_type="REPAIR", payer="INVESTOR", amount=1_000),
        Cost(cost_type="GAS", payer="MANAGER", amount=1_000),
    ]
    split = calculate_completion_split(
        100_000, costs, 112_000, 30, initial_investor_capital=80_000, initial_manager_capital=20_000
    )

    assert split.total_capital_investor == 81_000
    assert split.total_capital_manager == 21_000
    assert split.net_margin == 10_000
    assert split.profit_status == "PROFIT"
    assert split.investor_profit_amount == pytest.approx(3_000)
    assert split.manager_profit_amount == pytest.approx(7_000)


def test_completion_split_loss_shares_nothing():
    split = calculate_completion_split(100_000, [], 90_000, 40)

    assert split.total_capital_investor == 100_000
    assert split.total_capital_manager == 0
    assert split.profit_status == "LOSS"
    assert split.investor_profit_amount == 0
    assert split.manager_profit_amount == 0
