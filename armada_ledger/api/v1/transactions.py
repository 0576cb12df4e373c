"""Transaction endpoints - buy, costs, sale finalization, profit sharing and payouts"""

import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from armada_ledger.api.v1.schemas import (
    BulkIds,
    BulkPaymentStatus,
    BulkResult,
    CodeResponse,
    CostCreate,
    CostSchema,
    PaymentCreate,
    PaymentResponse,
    ProfitSharingSchema,
    ProfitSharingUpdate,
    SellRequest,
    SellResponse,
    TransactionCreate,
    TransactionSchema,
    TransactionStatusLiteral,
    TransactionUpdate,
)
from armada_ledger.api.v1.serializers import cost_schema, payment_schema, profit_sharing_schema, transaction_schema
from armada_ledger.api.dependencies import Caller, get_caller, get_request_id, parse_uuid, require_admin
from armada_ledger.config import settings
from armada_ledger.domain.codes import next_transaction_code
from armada_ledger.domain.exceptions import (
    ActiveTransactionExistsError,
    DomainException,
    ProfitSharingNotFoundError,
    SaleDetailsMissingError,
    TransactionAlreadyCompletedError,
    TransactionNotFoundError,
)
from armada_ledger.domain.models import PaymentStatus, TransactionStatus
from armada_ledger.domain.profit_sharing import (
    calculate_completion_split,
    calculate_profit_sharing,
    completion_shares,
    costs_by_payer,
    determine_payment_status,
    investor_should_receive,
    recalculate_shares,
    validate_share_split,
)
from armada_ledger.infrastructure.database.session import get_db
from armada_ledger.infrastructure.database.repositories import (
    ActivityLogRepository,
    CostRepository,
    InvestorRepository,
    PaymentRepository,
    TransactionRepository,
    UnitRepository,
    to_domain_cost,
)
from armada_ledger.infrastructure.observability.logging import log_sale_completed
from armada_ledger.infrastructure.observability.metrics import record_sale

router = APIRouter()


def _load_transaction(repo: TransactionRepository, transaction_id: str):
    db_transaction = repo.get_transaction(parse_uuid(transaction_id, "transaction ID"))
    if not db_transaction:
        raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
    return db_transaction


def _raise_http(e: DomainException) -> None:
    """Translate domain errors to HTTP responses"""
    if isinstance(e, (TransactionNotFoundError, ProfitSharingNotFoundError)):
        raise HTTPException(status_code=404, detail=str(e))
    raise HTTPException(status_code=400, detail=str(e))


@router.get("/transactions", response_model=List[TransactionSchema])
def list_transactions(
    status: Optional[TransactionStatusLiteral] = Query(None, description="Filter by transaction status"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return [transaction_schema(t) for t in TransactionRepository(db).list_transactions(status)]


@router.get("/transactions/next-code", response_model=CodeResponse)
def get_next_transaction_code(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    """Suggest the next TRX-YYYY-NNN code"""
    latest = TransactionRepository(db).latest_code()
    return CodeResponse(code=next_transaction_code(latest, date.today().year))


@router.post("/transactions", response_model=TransactionSchema)
def create_transaction(
    body: TransactionCreate,
    request: Request,
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Open a buy transaction; a unit may only have one ON_PROCESS transaction"""
    repo = TransactionRepository(db)
    unit_id = parse_uuid(body.unit_id, "unit ID")

    try:
        if not UnitRepository(db).get_unit(unit_id):
            raise HTTPException(status_code=404, detail="Unit not found")
        if repo.get_active_for_unit(unit_id):
            raise ActiveTransactionExistsError("Unit has an active transaction")

        fields = body.model_dump()
        fields["unit_id"] = unit_id
        db_transaction = repo.create_transaction(**fields)
        db.commit()

    except ActiveTransactionExistsError as e:
        logging.warning(f"Rejected transaction: {e}", extra={"request_id": get_request_id(request)})
        _raise_http(e)

    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"Transaction code {body.transaction_code} already exists")

    ActivityLogRepository(db).record(
        "CREATE",
        "TRANSACTION",
        str(db_transaction.id),
        f"Created transaction {db_transaction.transaction_code} for unit {db_transaction.unit_id}",
        caller.user_id,
        caller.name,
    )
    return transaction_schema(repo.get_transaction(db_transaction.id))


@router.delete("/transactions", response_model=BulkResult)
def delete_transactions(body: BulkIds, caller: Caller = Depends(require_admin), db: Session = Depends(get_db)):
    ids = [parse_uuid(i, "transaction ID") for i in body.ids]
    deleted = TransactionRepository(db).delete_transactions(ids)
    db.commit()

    ActivityLogRepository(db).record(
        "DELETE", "TRANSACTION", ",".join(body.ids), f"Deleted {deleted} transaction(s)", caller.user_id, caller.name
    )
    return BulkResult(affected=deleted)


@router.patch("/transactions", response_model=BulkResult)
def update_payment_status(
    body: BulkPaymentStatus,
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Bulk-set payment status"""
    ids = [parse_uuid(i, "transaction ID") for i in body.ids]
    updated = TransactionRepository(db).set_payment_status(ids, body.payment_status)
    db.commit()
    return BulkResult(affected=updated)


@router.get("/transactions/{transaction_id}", response_model=TransactionSchema)
def get_transaction(transaction_id: str, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    try:
        return transaction_schema(_load_transaction(TransactionRepository(db), transaction_id))
    except DomainException as e:
        _raise_http(e)


@router.put("/transactions/{transaction_id}", response_model=TransactionSchema)
def update_transaction(
    transaction_id: str,
    body: TransactionUpdate,
    request: Request,
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Edit transaction details and optionally change its status.

    Flow:
    1. Apply the detail fields present in the body
    2. ON_PROCESS -> COMPLETED: needs sell date and price; unit SOLD and the
       split rebuilt from the investor's margin unless shares are given
    3. COMPLETED -> ON_PROCESS: split removed, unit AVAILABLE
    4. Commit everything together
    """
    request_id = get_request_id(request)
    repo = TransactionRepository(db)

    fields = body.model_dump(exclude_unset=True)
    new_status = fields.pop("status", None)
    investor_pct = fields.pop("investor_share_percentage", None)
    manager_pct = fields.pop("manager_share_percentage", None)

    try:
        db_transaction = _load_transaction(repo, transaction_id)

        if "unit_id" in fields:
            db_unit = UnitRepository(db).get_unit(parse_uuid(fields.pop("unit_id"), "unit ID"))
            if not db_unit:
                raise HTTPException(status_code=404, detail="Unit not found")
            fields["unit"] = db_unit

        repo.update_transaction(db_transaction, **fields)

        if new_status and new_status != db_transaction.status:
            if new_status == TransactionStatus.COMPLETED.value:
                if not db_transaction.sell_date or not db_transaction.sell_price:
                    raise SaleDetailsMissingError(
                        "Cannot mark as COMPLETED without sell date and sell price"
                    )
                investor_pct, manager_pct = completion_shares(
                    db_transaction.unit.investor.margin_percentage, investor_pct, manager_pct
                )
                validate_share_split(investor_pct, manager_pct)
                split = calculate_completion_split(
                    buy_price=db_transaction.buy_price,
                    costs=[to_domain_cost(c) for c in db_transaction.costs],
                    sell_price=db_transaction.sell_price,
                    investor_pct=investor_pct,
                    initial_investor_capital=db_transaction.initial_investor_capital,
                    initial_manager_capital=db_transaction.initial_manager_capital,
                )
                repo.mark_completed(db_transaction, split, investor_pct, manager_pct)
            else:
                repo.reopen(db_transaction)
        db.commit()

    except HTTPException:
        db.rollback()
        raise

    except DomainException as e:
        db.rollback()
        logging.warning(f"Transaction update rejected: {e}", extra={"request_id": request_id})
        _raise_http(e)

    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"Transaction code {body.transaction_code} already exists")

    ActivityLogRepository(db).record(
        "UPDATE",
        "TRANSACTION",
        transaction_id,
        f"Updated transaction {db_transaction.transaction_code}. Status: {db_transaction.status}",
        caller.user_id,
        caller.name,
    )
    return transaction_schema(repo.get_transaction(db_transaction.id))


@router.delete("/transactions/{transaction_id}", response_model=BulkResult)
def delete_transaction(
    transaction_id: str,
    caller: Caller = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Delete one transaction; its unit goes back to AVAILABLE"""
    repo = TransactionRepository(db)
    try:
        db_transaction = _load_transaction(repo, transaction_id)
    except DomainException as e:
        _raise_http(e)

    code = db_transaction.transaction_code
    repo.delete_transaction(db_transaction)
    db.commit()

    ActivityLogRepository(db).record(
        "DELETE", "TRANSACTION", transaction_id, f"Deleted transaction {code}", caller.user_id, caller.name
    )
    return BulkResult(affected=1)


@router.post("/transactions/{transaction_id}/sell", response_model=SellResponse)
def sell_transaction(
    transaction_id: str,
    body: SellRequest,
    request: Request,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    Finalize a sale and split the margin.

    Flow:
    1. Load transaction with its costs (404 if missing, 400 if already COMPLETED)
    2. Compute capital per side, net margin and profit split
    3. Mark transaction COMPLETED and unit SOLD, create profit sharing
    4. Commit all three writes together
    """
    request_id = get_request_id(request)
    repo = TransactionRepository(db)

    investor_pct = (
        body.investor_share_percentage
        if body.investor_share_percentage is not None
        else settings.default_investor_share
    )
    manager_pct = (
        body.manager_share_percentage
        if body.manager_share_percentage is not None
        else settings.default_manager_share
    )

    try:
        validate_share_split(investor_pct, manager_pct)

        db_transaction = _load_transaction(repo, transaction_id)
        if db_transaction.status == TransactionStatus.COMPLETED.value:
            raise TransactionAlreadyCompletedError("Transaction already completed")

        split = calculate_profit_sharing(
            buy_price=db_transaction.buy_price,
            costs=[to_domain_cost(c) for c in db_transaction.costs],
            sell_price=body.sell_price,
            investor_pct=investor_pct,
            manager_pct=manager_pct,
        )

        db_profit_sharing = repo.complete_sale(
            db_transaction,
            sell_date=body.sell_date,
            sell_price=body.sell_price,
            split=split,
            investor_pct=investor_pct,
            manager_pct=manager_pct,
            loss_bearer=body.loss_bearer,
            notes=body.notes,
        )
        db.commit()

    except HTTPException:
        db.rollback()
        raise

    except DomainException as e:
        db.rollback()
        logging.warning(f"Sale rejected: {e}", extra={"request_id": request_id})
        _raise_http(e)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error finalizing sale: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_sale(split.profit_status, split.investor_profit_amount, split.manager_profit_amount)
    log_sale_completed(
        request_id, transaction_id, split.profit_status, split.net_margin, split.investor_profit_amount
    )
    ActivityLogRepository(db).record(
        "UPDATE",
        "TRANSACTION",
        transaction_id,
        f"Sold transaction {db_transaction.transaction_code} for {body.sell_price} ({split.profit_status})",
        caller.user_id,
        caller.name,
    )

    return SellResponse(
        transaction=transaction_schema(repo.get_transaction(db_transaction.id)),
        profit_sharing=profit_sharing_schema(db_profit_sharing),
    )


@router.patch("/transactions/{transaction_id}/profit-sharing", response_model=ProfitSharingSchema)
def update_profit_sharing(
    transaction_id: str,
    body: ProfitSharingUpdate,
    request: Request,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Re-split the stored margin with new percentages and re-evaluate payment status"""
    repo = TransactionRepository(db)

    try:
        validate_share_split(body.investor_share_percentage, body.manager_share_percentage)
        db_transaction = _load_transaction(repo, transaction_id)
        ps = db_transaction.profit_sharing
        if ps is None:
            raise ProfitSharingNotFoundError("Profit sharing record not found")

    except DomainException as e:
        logging.warning(f"Profit sharing update rejected: {e}", extra={"request_id": get_request_id(request)})
        _raise_http(e)

    investor_amount, manager_amount = recalculate_shares(
        ps.net_margin, body.investor_share_percentage, body.manager_share_percentage
    )
    ps.investor_share_percentage = body.investor_share_percentage
    ps.manager_share_percentage = body.manager_share_percentage
    ps.investor_profit_amount = investor_amount
    ps.manager_profit_amount = manager_amount

    total_paid = sum(p.amount for p in db_transaction.payment_histories)
    db_transaction.payment_status = determine_payment_status(
        investor_amount, total_paid, settings.payment_tolerance
    )
    db.commit()

    ActivityLogRepository(db).record(
        "UPDATE",
        "TRANSACTION",
        transaction_id,
        f"Profit sharing set to {body.investor_share_percentage}/{body.manager_share_percentage}",
        caller.user_id,
        caller.name,
    )
    return profit_sharing_schema(ps)


@router.post("/transactions/{transaction_id}/costs", response_model=CostSchema)
def add_cost(
    transaction_id: str,
    body: CostCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    try:
        db_transaction = _load_transaction(TransactionRepository(db), transaction_id)
    except DomainException as e:
        _raise_http(e)

    db_cost = CostRepository(db).create_cost(
        db_transaction.id,
        cost_type=body.cost_type,
        payer=body.payer,
        amount=body.amount,
        description=body.description,
        date=body.cost_date,
    )
    db.commit()

    ActivityLogRepository(db).record(
        "CREATE",
        "COST",
        str(db_cost.id),
        f"Added {db_cost.cost_type} cost {db_cost.amount} paid by {db_cost.payer} to {db_transaction.transaction_code}",
        caller.user_id,
        caller.name,
    )
    return cost_schema(db_cost)


@router.put("/transactions/{transaction_id}/costs/{cost_id}", response_model=CostSchema)
def update_cost(
    transaction_id: str,
    cost_id: str,
    body: CostCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    repo = CostRepository(db)
    db_cost = repo.get_cost(parse_uuid(transaction_id, "transaction ID"), parse_uuid(cost_id, "cost ID"))
    if not db_cost:
        raise HTTPException(status_code=404, detail="Cost not found")

    repo.update_cost(
        db_cost,
        cost_type=body.cost_type,
        payer=body.payer,
        amount=body.amount,
        description=body.description,
        date=body.cost_date,
    )
    db.commit()

    ActivityLogRepository(db).record(
        "UPDATE",
        "COST",
        cost_id,
        f"Updated {db_cost.cost_type} cost to {db_cost.amount} paid by {db_cost.payer}",
        caller.user_id,
        caller.name,
    )
    return cost_schema(db_cost)


@router.delete("/transactions/{transaction_id}/costs/{cost_id}", response_model=BulkResult)
def delete_cost(
    transaction_id: str,
    cost_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    repo = CostRepository(db)
    db_cost = repo.get_cost(parse_uuid(transaction_id, "transaction ID"), parse_uuid(cost_id, "cost ID"))
    if not db_cost:
        raise HTTPException(status_code=404, detail="Cost not found")

    repo.delete_cost(db_cost)
    db.commit()

    ActivityLogRepository(db).record("DELETE", "COST", cost_id, "Deleted cost", caller.user_id, caller.name)
    return BulkResult(affected=1)


@router.post("/transactions/{transaction_id}/payments", response_model=PaymentResponse)
def add_payment(
    transaction_id: str,
    body: PaymentCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    Record a payout to the investor.

    The payee defaults to the unit owner; any other investor is rejected.
    The transaction is marked PAID on every recorded payout regardless of
    the amount; investor_should_receive is reported for reference.
    """
    repo = TransactionRepository(db)
    try:
        db_transaction = _load_transaction(repo, transaction_id)
    except DomainException as e:
        _raise_http(e)

    owner_id = db_transaction.unit.investor_id
    investor_id = owner_id
    if body.investor_id is not None:
        investor_id = parse_uuid(body.investor_id, "investor ID")
        if not InvestorRepository(db).get_investor(investor_id):
            raise HTTPException(status_code=404, detail="Investor not found")
        if investor_id != owner_id:
            raise HTTPException(status_code=400, detail="Investor does not own this transaction's unit")

    payments = PaymentRepository(db)
    db_payment = payments.create_payment(
        transaction_id=db_transaction.id,
        investor_id=investor_id,
        amount=body.amount,
        payment_date=body.payment_date,
        method=body.method,
        proof_image_url=body.proof_image_url,
        notes=body.notes,
    )
    total_paid = payments.total_paid(db_transaction.id)

    investor_costs, _ = costs_by_payer(to_domain_cost(c) for c in db_transaction.costs)
    ps = db_transaction.profit_sharing
    should_receive = investor_should_receive(
        db_transaction.initial_investor_capital or db_transaction.buy_price,
        investor_costs,
        ps.investor_profit_amount if ps else 0,
    )

    db_transaction.payment_status = PaymentStatus.PAID.value
    db.commit()

    ActivityLogRepository(db).record(
        "CREATE",
        "PAYMENT",
        str(db_payment.id),
        f"Recorded payment {db_payment.amount} for {db_transaction.transaction_code}",
        caller.user_id,
        caller.name,
    )
    return PaymentResponse(
        payment=payment_schema(db_payment),
        payment_status=PaymentStatus.PAID.value,
        total_paid=total_paid,
        investor_should_receive=should_receive,
    )
