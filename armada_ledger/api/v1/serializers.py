"""ORM/domain -> response schema conversion shared by the v1 routers"""

from armada_ledger.api.v1.schemas import (
    CostSchema,
    DashboardTransaction,
    InvestorDashboardResponse,
    InvestorSchema,
    InvestorStatsSchema,
    MonthlyIncomeSchema,
    PaymentSchema,
    ProfitSharingSchema,
    TransactionSchema,
    UnitSchema,
)
from armada_ledger.domain.models import InvestorDashboard
from armada_ledger.infrastructure.database import models as orm


def investor_schema(inv) -> InvestorSchema:
    """Works for both the ORM row and the domain dataclass"""
    return InvestorSchema(
        id=str(inv.id),
        name=inv.name,
        contact_info=inv.contact_info,
        bank_account_details=inv.bank_account_details,
        notes=inv.notes,
        margin_percentage=inv.margin_percentage,
        user_id=inv.user_id,
    )


def unit_schema(unit: orm.Unit) -> UnitSchema:
    return UnitSchema(
        id=str(unit.id),
        investor_id=str(unit.investor_id),
        investor_name=unit.investor.name if unit.investor else None,
        name=unit.name,
        plate_number=unit.plate_number,
        code=unit.code,
        image_url=unit.image_url,
        tax_due_date=unit.tax_due_date,
        status=unit.status,
    )


def cost_schema(cost: orm.Cost) -> CostSchema:
    return CostSchema(
        id=str(cost.id),
        cost_type=cost.cost_type,
        payer=cost.payer,
        amount=cost.amount,
        description=cost.description,
        cost_date=cost.date,
    )


def payment_schema(payment: orm.PaymentHistory) -> PaymentSchema:
    return PaymentSchema(
        id=str(payment.id),
        amount=payment.amount,
        payment_date=payment.payment_date,
        method=payment.method,
        proof_image_url=payment.proof_image_url,
        notes=payment.notes,
    )


def profit_sharing_schema(ps) -> ProfitSharingSchema:
    return ProfitSharingSchema(
        total_capital_investor=ps.total_capital_investor,
        total_capital_manager=ps.total_capital_manager,
        total_capital=ps.total_capital,
        net_margin=ps.net_margin,
        investor_share_percentage=ps.investor_share_percentage,
        manager_share_percentage=ps.manager_share_percentage,
        investor_profit_amount=ps.investor_profit_amount,
        manager_profit_amount=ps.manager_profit_amount,
    )


def transaction_schema(txn: orm.Transaction) -> TransactionSchema:
    unit = txn.unit
    return TransactionSchema(
        id=str(txn.id),
        unit_id=str(txn.unit_id),
        unit_name=unit.name if unit else None,
        investor_name=unit.investor.name if unit and unit.investor else None,
        transaction_code=txn.transaction_code,
        status=txn.status,
        buy_date=txn.buy_date,
        buy_price=txn.buy_price,
        initial_investor_capital=txn.initial_investor_capital,
        initial_manager_capital=txn.initial_manager_capital,
        sell_date=txn.sell_date,
        sell_price=txn.sell_price,
        profit_status=txn.profit_status,
        payment_status=txn.payment_status,
        notes=txn.notes,
        costs=[cost_schema(c) for c in txn.costs],
        profit_sharing=profit_sharing_schema(txn.profit_sharing) if txn.profit_sharing else None,
        payments=[payment_schema(p) for p in txn.payment_histories],
    )


def dashboard_response(dashboard: InvestorDashboard) -> InvestorDashboardResponse:
    stats = dashboard.stats
    return InvestorDashboardResponse(
        linked=True,
        investor=investor_schema(dashboard.investor),
        stats=InvestorStatsSchema(
            total_invested=stats.total_invested,
            total_profit=stats.total_profit,
            total_received=stats.total_received,
            active_units_count=stats.active_units_count,
            total_units_count=stats.total_units_count,
        ),
        recent_transactions=[
            DashboardTransaction(
                id=t.id,
                transaction_code=t.transaction_code,
                status=t.status,
                buy_price=t.buy_price,
                initial_investor_capital=t.initial_investor_capital,
                sell_price=t.sell_price,
                investor_profit_amount=t.profit_sharing.investor_profit_amount if t.profit_sharing else None,
            )
            for t in dashboard.recent_transactions
        ],
        monthly_income=[
            MonthlyIncomeSchema(year=m.year, month=m.month, income=m.income) for m in dashboard.monthly_income
        ],
    )
