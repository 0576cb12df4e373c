"""Investor endpoints - CRUD and per-investor report"""

import logging
from datetime import datetime, timezone
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from armada_ledger.api.v1.schemas import (
    InvestorCreate,
    InvestorReportResponse,
    InvestorSchema,
    InvestorUpdate,
    ReportSummary,
    ReportTransaction,
)
from armada_ledger.api.v1.serializers import investor_schema
from armada_ledger.api.dependencies import Caller, get_caller, get_request_id, parse_uuid, require_admin
from armada_ledger.domain.models import TransactionStatus, UnitStatus
from armada_ledger.domain.profit_sharing import costs_by_payer
from armada_ledger.infrastructure.database.session import get_db
from armada_ledger.infrastructure.database.repositories import (
    ActivityLogRepository,
    InvestorRepository,
    to_domain_cost,
)

router = APIRouter()


@router.get("/investors", response_model=List[InvestorSchema])
def list_investors(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    """All investors, newest first"""
    return [investor_schema(inv) for inv in InvestorRepository(db).list_investors()]


@router.post("/investors", response_model=InvestorSchema)
def create_investor(
    body: InvestorCreate,
    request: Request,
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        db_investor = InvestorRepository(db).create_investor(**body.model_dump())
        db.commit()
    except IntegrityError:
        db.rollback()
        logging.warning("Investor user link already taken", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=400, detail="User is already linked to another investor")

    ActivityLogRepository(db).record(
        "CREATE", "INVESTOR", str(db_investor.id), f"Created investor {db_investor.name}", caller.user_id, caller.name
    )
    return investor_schema(db_investor)


@router.put("/investors/{investor_id}", response_model=InvestorSchema)
def update_investor(
    investor_id: str,
    body: InvestorUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    repo = InvestorRepository(db)
    db_investor = repo.get_investor(parse_uuid(investor_id, "investor ID"))
    if not db_investor:
        raise HTTPException(status_code=404, detail="Investor not found")

    repo.update_investor(db_investor, **body.model_dump(exclude_none=True))
    db.commit()

    ActivityLogRepository(db).record(
        "UPDATE", "INVESTOR", str(db_investor.id), f"Updated investor {db_investor.name}", caller.user_id, caller.name
    )
    return investor_schema(db_investor)


@router.get("/investors/{investor_id}/report", response_model=InvestorReportResponse)
def get_investor_report(
    investor_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    Per-investor statement.

    Unlike the dashboard, profit here sums every investor profit amount, and
    capital only counts transactions still ON_PROCESS.
    """
    db_investor = InvestorRepository(db).load_report_units(parse_uuid(investor_id, "investor ID"))
    if not db_investor:
        raise HTTPException(status_code=404, detail="Investor not found")

    rows = []
    completed = 0
    total_profit = 0
    capital_deployed = 0
    active_units = 0

    for unit in db_investor.units:
        open_txns = [t for t in unit.transactions if t.status == TransactionStatus.ON_PROCESS.value]
        if unit.status == UnitStatus.AVAILABLE.value or open_txns:
            active_units += 1

        for txn in sorted(unit.transactions, key=lambda t: t.buy_date, reverse=True):
            if txn.status == TransactionStatus.COMPLETED.value:
                completed += 1
            ps = txn.profit_sharing
            # A zero override falls back to the buy price on statements
            capital = txn.initial_investor_capital or txn.buy_price
            investor_profit = ps.investor_profit_amount if ps else 0
            total_profit += investor_profit
            if txn.status == TransactionStatus.ON_PROCESS.value:
                capital_deployed += capital

            investor_costs, manager_costs = costs_by_payer(to_domain_cost(c) for c in txn.costs)
            rows.append(
                ReportTransaction(
                    id=str(txn.id),
                    transaction_code=txn.transaction_code,
                    unit_name=unit.name,
                    unit_plate_number=unit.plate_number,
                    status=txn.status,
                    buy_date=txn.buy_date,
                    sell_date=txn.sell_date,
                    buy_price=txn.buy_price,
                    sell_price=txn.sell_price or 0,
                    initial_investor_capital=capital,
                    total_costs=investor_costs + manager_costs,
                    investor_costs=investor_costs,
                    manager_costs=manager_costs,
                    net_margin=ps.net_margin if ps else 0,
                    investor_profit_amount=investor_profit,
                    manager_profit_amount=ps.manager_profit_amount if ps else 0,
                    payment_status=txn.payment_status,
                    total_paid=sum(p.amount for p in txn.payment_histories),
                )
            )

    return InvestorReportResponse(
        investor=investor_schema(db_investor),
        summary=ReportSummary(
            total_active_units=active_units,
            total_completed_transactions=completed,
            total_capital_deployed=capital_deployed,
            total_profit=total_profit,
        ),
        transactions=rows,
        generated_at=datetime.now(timezone.utc).isoformat(),
    )
