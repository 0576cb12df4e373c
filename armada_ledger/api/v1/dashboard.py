"""Dashboards - investor self-service view and admin overview"""

import time
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from armada_ledger.api.v1.schemas import (
    AdminDashboardResponse,
    InvestorDashboardResponse,
    InvestorOverview,
    RecentTransaction,
    StatusCount,
)
from armada_ledger.api.v1.serializers import dashboard_response
from armada_ledger.api.dependencies import Caller, get_caller, get_request_id, parse_uuid
from armada_ledger.config import settings
from armada_ledger.domain.aggregation import compute_investor_stats
from armada_ledger.domain.models import TransactionStatus
from armada_ledger.infrastructure.database.session import get_db
from armada_ledger.infrastructure.database.repositories import (
    InvestorRepository,
    TransactionRepository,
    UnitRepository,
)
from armada_ledger.infrastructure.observability.logging import log_dashboard
from armada_ledger.infrastructure.observability.metrics import record_dashboard

router = APIRouter()


def _investor_dashboard(db: Session, investor_id, request_id: str) -> InvestorDashboardResponse:
    start_time = time.time()
    dashboard = compute_investor_stats(
        investor_id,
        InvestorRepository(db),
        recent_limit=settings.recent_transactions_limit,
        income_months=settings.monthly_income_months,
    )

    linked = dashboard is not None
    record_dashboard(linked)
    log_dashboard(request_id, str(investor_id), linked, (time.time() - start_time) * 1000)

    if not linked:
        return InvestorDashboardResponse(linked=False)
    return dashboard_response(dashboard)


@router.get("/me/dashboard", response_model=InvestorDashboardResponse)
def get_my_dashboard(
    request: Request,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    Dashboard for the investor linked to the calling user.

    Returns linked=false (not an error) when the user has no investor.
    """
    request_id = get_request_id(request)
    investor = InvestorRepository(db).get_by_user_id(caller.user_id)
    if investor is None:
        record_dashboard(False)
        log_dashboard(request_id, None, False, 0.0)
        return InvestorDashboardResponse(linked=False)
    return _investor_dashboard(db, investor.id, request_id)


@router.get("/investors/{investor_id}/dashboard", response_model=InvestorDashboardResponse)
def get_investor_dashboard(
    investor_id: str,
    request: Request,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    Dashboard for an explicit investor; 404 when it does not exist.

    Admins may read any investor; other callers only the investor linked to
    their own login.
    """
    investor_uuid = parse_uuid(investor_id, "investor ID")
    if not caller.is_admin:
        own = InvestorRepository(db).get_by_user_id(caller.user_id)
        if own is None or own.id != investor_uuid:
            raise HTTPException(status_code=403, detail="Forbidden")

    response = _investor_dashboard(db, investor_uuid, get_request_id(request))
    if not response.linked:
        raise HTTPException(status_code=404, detail="Investor not found")
    return response


@router.get("/dashboard", response_model=AdminDashboardResponse)
def get_admin_dashboard(
    investor_id: Optional[str] = Query(None, description="Restrict figures to one investor"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    Operation-wide overview.

    Returns:
        Unit/transaction counts, profit totals, per-investor stats, unit status
        distribution, capital in open transactions and recent transactions
    """
    investor_uuid = parse_uuid(investor_id, "investor ID") if investor_id else None

    unit_repo = UnitRepository(db)
    txn_repo = TransactionRepository(db)
    investor_repo = InvestorRepository(db)

    total_margin, investor_profit, manager_profit = txn_repo.profit_totals(investor_uuid)

    recent = []
    for txn in txn_repo.recent(limit=settings.recent_transactions_limit, investor_id=investor_uuid):
        completed = txn.status == TransactionStatus.COMPLETED.value
        recent.append(
            RecentTransaction(
                id=str(txn.id),
                code=txn.transaction_code,
                unit_name=txn.unit.name,
                type="Sold" if completed else "Buy",
                amount=(txn.sell_price or 0) if completed else txn.buy_price,
                occurred_on=(txn.sell_date or txn.updated_at.date()) if completed else txn.buy_date,
                status=txn.status,
            )
        )

    return AdminDashboardResponse(
        active_units=unit_repo.count_available(investor_uuid),
        completed_transactions=txn_repo.count_completed(investor_uuid),
        total_margin=total_margin,
        total_investor_profit=investor_profit,
        total_manager_profit=manager_profit,
        total_capital_deployed=txn_repo.capital_deployed(investor_uuid),
        investor_stats=[InvestorOverview(**row) for row in investor_repo.investor_overview()],
        unit_status_distribution=[
            StatusCount(name=status, value=count) for status, count in unit_repo.status_distribution(investor_uuid)
        ],
        recent_transactions=recent,
    )
