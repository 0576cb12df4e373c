"""Profit-sharing engine - margin split between investor and manager"""

from typing import Iterable, Optional, Tuple
from armada_ledger.domain.models import Cost, CostPayer, PaymentStatus, ProfitSplit, ProfitStatus
from armada_ledger.domain.exceptions import InvalidShareSplitError


def validate_share_split(investor_pct: float, manager_pct: float) -> None:
    """Both shares must lie in 0-100 and add up to 100"""
    for pct in (investor_pct, manager_pct):
        if pct < 0 or pct > 100:
            raise InvalidShareSplitError(f"Share percentage {pct} outside 0-100")
    if abs(investor_pct + manager_pct - 100) > 1e-9:
        raise InvalidShareSplitError(
            f"Shares must sum to 100, got {investor_pct} + {manager_pct}"
        )


def costs_by_payer(costs: Iterable[Cost]) -> Tuple[float, float]:
    """Return (investor_costs, manager_costs)"""
    investor_costs = 0
    manager_costs = 0
    for cost in costs:
        if cost.payer == CostPayer.INVESTOR.value:
            investor_costs += cost.amount
        elif cost.payer == CostPayer.MANAGER.value:
            manager_costs += cost.amount
    return investor_costs, manager_costs


def recalculate_shares(net_margin: float, investor_pct: float, manager_pct: float) -> Tuple[float, float]:
    """
    Split a margin into (investor_amount, manager_amount).

    Only a positive margin is shared; a loss or break-even leaves both at 0.
    """
    if net_margin <= 0:
        return 0, 0
    return net_margin * (investor_pct / 100), net_margin * (manager_pct / 100)


def calculate_profit_sharing(
    buy_price: float,
    costs: Iterable[Cost],
    sell_price: float,
    investor_pct: float,
    manager_pct: float,
) -> ProfitSplit:
    """
    Compute the profit split for a sale.

    Investor capital is the buy price plus costs the investor paid; manager
    capital is the costs the manager paid.

    Example:
        buy 100,000, investor costs 5,000, manager costs 2,000, sell 127,000
        -> total capital 107,000, net margin 20,000
        -> 40/60 split: investor 8,000, manager 12,000
    """
    investor_costs, manager_costs = costs_by_payer(costs)

    total_capital_investor = buy_price + investor_costs
    total_capital_manager = manager_costs
    total_capital = total_capital_investor + total_capital_manager
    net_margin = sell_price - total_capital

    if net_margin > 0:
        profit_status = ProfitStatus.PROFIT.value
    elif net_margin < 0:
        profit_status = ProfitStatus.LOSS.value
    else:
        profit_status = ProfitStatus.BREAK_EVEN.value

    investor_amount, manager_amount = recalculate_shares(net_margin, investor_pct, manager_pct)

    return ProfitSplit(
        total_capital_investor=total_capital_investor,
        total_capital_manager=total_capital_manager,
        total_capital=total_capital,
        net_margin=net_margin,
        profit_status=profit_status,
        investor_profit_amount=investor_amount,
        manager_profit_amount=manager_amount,
    )


def completion_shares(
    margin_percentage: Optional[float],
    investor_pct: Optional[float] = None,
    manager_pct: Optional[float] = None,
) -> Tuple[float, float]:
    """
    Shares used when a transaction is switched to COMPLETED by an edit.

    Explicit percentages win; otherwise the investor's own margin (50 when
    unset) and the manager gets the remainder.
    """
    if investor_pct is None:
        investor_pct = margin_percentage if margin_percentage is not None else 50
    if manager_pct is None:
        manager_pct = 100 - investor_pct
    return investor_pct, manager_pct


def calculate_completion_split(
    buy_price: float,
    costs: Iterable[Cost],
    sell_price: float,
    investor_pct: float,
    initial_investor_capital: Optional[float] = None,
    initial_manager_capital: Optional[float] = None,
) -> ProfitSplit:
    """
    Rebuild the split for a transaction marked COMPLETED through an edit.

    Capital starts from the recorded initial capital on each side (buy price
    and 0 when absent). The margin is sell minus buy minus all costs, and the
    manager takes whatever of a positive margin the investor does not.
    """
    investor_costs, manager_costs = costs_by_payer(costs)

    base_investor = initial_investor_capital if initial_investor_capital is not None else buy_price
    base_manager = initial_manager_capital if initial_manager_capital is not None else 0
    total_capital_investor = base_investor + investor_costs
    total_capital_manager = base_manager + manager_costs

    net_margin = sell_price - buy_price - (investor_costs + manager_costs)

    investor_amount = 0
    manager_amount = 0
    if net_margin > 0:
        profit_status = ProfitStatus.PROFIT.value
        investor_amount = net_margin * investor_pct / 100
        manager_amount = net_margin - investor_amount
    elif net_margin < 0:
        profit_status = ProfitStatus.LOSS.value
    else:
        profit_status = ProfitStatus.BREAK_EVEN.value

    return ProfitSplit(
        total_capital_investor=total_capital_investor,
        total_capital_manager=total_capital_manager,
        total_capital=total_capital_investor + total_capital_manager,
        net_margin=net_margin,
        profit_status=profit_status,
        investor_profit_amount=investor_amount,
        manager_profit_amount=manager_amount,
    )


def determine_payment_status(investor_profit_amount: float, total_paid: float, tolerance: float = 100) -> str:
    """Map what has been paid against what is owed to UNPAID / PARTIAL / PAID"""
    remaining = investor_profit_amount - total_paid
    if remaining <= tolerance:
        return PaymentStatus.PAID.value
    if total_paid > 0:
        return PaymentStatus.PARTIAL.value
    return PaymentStatus.UNPAID.value


def investor_should_receive(capital: float, investor_costs: float, investor_profit_amount: float) -> float:
    """Capital returned to the investor net of their costs, plus their profit"""
    return capital - investor_costs + investor_profit_amount
