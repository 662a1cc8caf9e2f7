# backend/routes/logs.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from database import get_db
from models.log import AuditLog
from models.users import User
from utils.tokenJWT import admin_only

router = APIRouter(prefix="/logs", tags=["Logs"])

# --- SCHEMAS ---
class LogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    user_email: Optional[str] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None

    model_config = ConfigDict(from_attributes=True)

class LogPage(BaseModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int


def parse_date_bound(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """YYYY-MM-DD or ISO datetime; a bare end date covers the whole day. Bad input is ignored."""
    if not value:
        return None
    text = value
    if end_of_day and len(text) == 10:
        text += " 23:59:59"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


# --- ENDPOINT ---
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    user_id: Optional[int] = Query(None, description="Filter by user ID"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="Filter by status (SUCCESS/FAIL)"),
    date_from: Optional[str] = Query(None, description="From date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, description="To date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    query = db.query(AuditLog)

    if action:
        query = query.filter(AuditLog.action.ilike(f"%{action}%"))
    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)
    if resource:
        query = query.filter(AuditLog.resource.ilike(f"%{resource}%"))
    if status:
        query = query.filter(AuditLog.status == status.upper())

    dt_from = parse_date_bound(date_from)
    if dt_from:
        query = query.filter(AuditLog.ts >= dt_from)
    dt_to = parse_date_bound(date_to, end_of_day=True)
    if dt_to:
        query = query.filter(AuditLog.ts <= dt_to)

    # Newest first
    query = query.order_by(AuditLog.ts.desc(), AuditLog.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    items = []
    for entry in logs:
        row = LogResponse.model_validate(entry)
        # Failed logins with an unknown email only carry it in meta
        row.user_email = entry.user.email if entry.user else (entry.meta or {}).get("email")
        items.append(row)

    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
    }
