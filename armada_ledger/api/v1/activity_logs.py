"""GET /v1/activity-logs - Audit trail of recent changes"""

from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from armada_ledger.api.v1.schemas import ActivityLogSchema
from armada_ledger.api.dependencies import Caller, get_caller
from armada_ledger.infrastructure.database.session import get_db
from armada_ledger.infrastructure.database.repositories import ActivityLogRepository

router = APIRouter()


@router.get("/activity-logs", response_model=List[ActivityLogSchema])
def get_activity_logs(
    limit: int = Query(50, ge=1, le=500, description="Maximum entries to return"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Most recent activity first"""
    return [
        ActivityLogSchema(
            id=str(log.id),
            action=log.action,
            entity=log.entity,
            entity_id=log.entity_id,
            details=log.details,
            user_id=log.user_id,
            user_name=log.user_name,
            created_at=log.created_at.isoformat(),
        )
        for log in ActivityLogRepository(db).recent(limit)
    ]
