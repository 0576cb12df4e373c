"""Dependency injection for FastAPI endpoints"""

import uuid
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, Header, HTTPException, Request


@dataclass
class Caller:
    """Identity forwarded by the upstream authentication layer"""

    user_id: str
    role: str
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_caller(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
) -> Caller:
    """Authenticated caller; 401 when the gateway forwarded no identity"""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return Caller(user_id=x_user_id, role=(x_user_role or "INVESTOR").upper(), name=x_user_name)


def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden")
    return caller


def parse_uuid(value: str, label: str = "ID") -> uuid.UUID:
    """Parse a path/body identifier, 400 on malformed input"""
    try:
        return uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid {label} format")
