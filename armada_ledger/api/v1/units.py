"""Unit endpoints - vehicle inventory, next code and tax reminders"""

from datetime import date
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from armada_ledger.api.v1.schemas import BulkIds, BulkResult, CodeResponse, TaxReminder, UnitCreate, UnitSchema
from armada_ledger.api.v1.serializers import unit_schema
from armada_ledger.api.dependencies import Caller, get_caller, parse_uuid
from armada_ledger.config import settings
from armada_ledger.domain.codes import next_unit_code
from armada_ledger.infrastructure.database.session import get_db
from armada_ledger.infrastructure.database.repositories import (
    ActivityLogRepository,
    InvestorRepository,
    UnitRepository,
)
from armada_ledger.utils.date_utils import reminder_window

router = APIRouter()


@router.get("/units", response_model=List[UnitSchema])
def list_units(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    return [unit_schema(u) for u in UnitRepository(db).list_units()]


@router.get("/units/next-code", response_model=CodeResponse)
def get_next_unit_code(caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    """Suggest the next sequential unit code"""
    return CodeResponse(code=next_unit_code(UnitRepository(db).latest_code()))


@router.get("/units/reminders", response_model=List[TaxReminder])
def get_tax_reminders(
    days: int = Query(settings.reminder_days, ge=0, description="Look-ahead window in days"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """AVAILABLE units whose vehicle tax falls due within the window"""
    start, end = reminder_window(date.today(), days)
    return [
        TaxReminder(
            id=str(u.id),
            name=u.name,
            plate_number=u.plate_number,
            tax_due_date=u.tax_due_date,
            investor_name=u.investor.name,
        )
        for u in UnitRepository(db).tax_due_between(start, end)
    ]


@router.post("/units", response_model=UnitSchema)
def create_unit(body: UnitCreate, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    investor_id = parse_uuid(body.investor_id, "investor ID")
    if not InvestorRepository(db).get_investor(investor_id):
        raise HTTPException(status_code=404, detail="Investor not found")

    fields = body.model_dump()
    fields["investor_id"] = investor_id
    try:
        db_unit = UnitRepository(db).create_unit(**fields)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"Unit code {body.code} already exists")

    ActivityLogRepository(db).record(
        "CREATE", "UNIT", str(db_unit.id), f"Created unit {db_unit.code} ({db_unit.plate_number})",
        caller.user_id, caller.name,
    )
    return unit_schema(db_unit)


@router.put("/units/{unit_id}", response_model=UnitSchema)
def update_unit(
    unit_id: str,
    body: UnitCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Replace a unit's details, including its status (e.g. MAINTENANCE)"""
    repo = UnitRepository(db)
    db_unit = repo.get_unit(parse_uuid(unit_id, "unit ID"))
    if not db_unit:
        raise HTTPException(status_code=404, detail="Unit not found")

    investor_id = parse_uuid(body.investor_id, "investor ID")
    db_investor = InvestorRepository(db).get_investor(investor_id)
    if not db_investor:
        raise HTTPException(status_code=404, detail="Investor not found")

    fields = body.model_dump(exclude={"investor_id"})
    try:
        repo.update_unit(db_unit, investor=db_investor, **fields)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"Unit code {body.code} already exists")

    ActivityLogRepository(db).record(
        "UPDATE", "UNIT", str(db_unit.id), f"Updated unit {db_unit.code} ({db_unit.status})",
        caller.user_id, caller.name,
    )
    return unit_schema(db_unit)


@router.delete("/units/{unit_id}", response_model=BulkResult)
def delete_unit(unit_id: str, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    """Delete one unit together with its transactions"""
    repo = UnitRepository(db)
    db_unit = repo.get_unit(parse_uuid(unit_id, "unit ID"))
    if not db_unit:
        raise HTTPException(status_code=404, detail="Unit not found")

    code = db_unit.code
    repo.delete_unit(db_unit)
    db.commit()

    ActivityLogRepository(db).record("DELETE", "UNIT", unit_id, f"Deleted unit {code}", caller.user_id, caller.name)
    return BulkResult(affected=1)


@router.delete("/units", response_model=BulkResult)
def delete_units(body: BulkIds, caller: Caller = Depends(get_caller), db: Session = Depends(get_db)):
    ids = [parse_uuid(i, "unit ID") for i in body.ids]
    deleted = UnitRepository(db).delete_units(ids)
    db.commit()

    ActivityLogRepository(db).record(
        "DELETE", "UNIT", ",".join(body.ids), f"Deleted {deleted} unit(s)", caller.user_id, caller.name
    )
    return BulkResult(affected=deleted)
