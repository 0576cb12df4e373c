"""GET /v1/reports/transactions/{transaction_id} - Profit-sharing statement for one sale"""

from datetime import date, datetime, timezone
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from armada_ledger.api.v1.schemas import (
    SaleReportCapital,
    SaleReportCosts,
    SaleReportInvestor,
    SaleReportPayment,
    SaleReportTransaction,
    SaleReportUnit,
    TransactionReportResponse,
)
from armada_ledger.api.v1.serializers import cost_schema, payment_schema, profit_sharing_schema
from armada_ledger.api.dependencies import Caller, get_caller, parse_uuid
from armada_ledger.config import settings
from armada_ledger.domain.models import TransactionStatus
from armada_ledger.domain.profit_sharing import costs_by_payer, determine_payment_status
from armada_ledger.infrastructure.database.session import get_db
from armada_ledger.infrastructure.database.repositories import TransactionRepository, to_domain_cost

router = APIRouter()


@router.get("/reports/transactions/{transaction_id}", response_model=TransactionReportResponse)
def get_transaction_report(
    transaction_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    Statement for a completed sale.

    Payment progress is measured against the investor's profit share only,
    so a remaining balance of 0 means the profit has been fully paid out.
    """
    db_transaction = TransactionRepository(db).get_transaction(parse_uuid(transaction_id, "transaction ID"))
    if not db_transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    if db_transaction.status != TransactionStatus.COMPLETED.value:
        raise HTTPException(status_code=400, detail="Report is only available for completed transactions")

    unit = db_transaction.unit
    investor = unit.investor
    costs = sorted(db_transaction.costs, key=lambda c: c.date or date.min)
    histories = sorted(db_transaction.payment_histories, key=lambda p: p.payment_date)
    ps = db_transaction.profit_sharing

    investor_costs, manager_costs = costs_by_payer(to_domain_cost(c) for c in costs)
    investor_capital = db_transaction.initial_investor_capital or db_transaction.buy_price
    manager_capital = db_transaction.initial_manager_capital or 0

    profit_due = ps.investor_profit_amount if ps else 0
    total_paid = sum(p.amount for p in histories)
    payment_status = determine_payment_status(profit_due, total_paid, settings.payment_tolerance)

    duration_days = 0
    if db_transaction.sell_date and db_transaction.buy_date:
        duration_days = (db_transaction.sell_date - db_transaction.buy_date).days

    return TransactionReportResponse(
        transaction=SaleReportTransaction(
            id=str(db_transaction.id),
            transaction_code=db_transaction.transaction_code,
            buy_date=db_transaction.buy_date,
            sell_date=db_transaction.sell_date,
            buy_price=db_transaction.buy_price,
            sell_price=db_transaction.sell_price or 0,
            status=db_transaction.status,
            payment_status=payment_status,
            duration_days=duration_days,
        ),
        unit=SaleReportUnit(
            name=unit.name,
            plate_number=unit.plate_number,
            code=unit.code,
            image_url=unit.image_url,
        ),
        investor=SaleReportInvestor(
            name=investor.name,
            contact_info=investor.contact_info or "-",
            bank_account_details=investor.bank_account_details or "-",
        ),
        capital=SaleReportCapital(
            investor_capital=investor_capital,
            manager_capital=manager_capital,
            total_capital=investor_capital + manager_capital,
        ),
        costs=SaleReportCosts(
            items=[cost_schema(c) for c in costs],
            investor_costs=investor_costs,
            manager_costs=manager_costs,
            total_costs=investor_costs + manager_costs,
        ),
        profit_sharing=profit_sharing_schema(ps) if ps else None,
        payment=SaleReportPayment(
            investor_profit_due=profit_due,
            total_paid=total_paid,
            remaining=profit_due - total_paid,
            payment_status=payment_status,
            histories=[payment_schema(p) for p in histories],
        ),
        generated_at=datetime.now(timezone.utc).isoformat(),
    )
