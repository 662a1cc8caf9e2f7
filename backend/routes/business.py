# backend/routes/business.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from database import get_db
from models.business import BusinessSettings
from models.users import User
from utils.tokenJWT import get_current_user, admin_only
from utils.audit import write_log, client_ip
from schemas.business import BusinessSettingsOut, BusinessSettingsUpdate

router = APIRouter(prefix="/business-settings", tags=["Business"])


def get_business(db: Session) -> BusinessSettings:
    # Single-row table; created on first access
    b = db.query(BusinessSettings).first()
    if not b:
        b = BusinessSettings()
        db.add(b)
        db.commit()
        db.refresh(b)
    return b


def business_dict(db: Session) -> dict:
    b = db.query(BusinessSettings).first()
    if not b:
        return {}
    return BusinessSettingsOut.model_validate(b).model_dump()


# Retrieve shop details
@router.get("", response_model=BusinessSettingsOut)
def get_settings(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_business(db)


# Update shop details (Admin only)
@router.patch("", response_model=BusinessSettingsOut)
def update_settings(payload: BusinessSettingsUpdate, request: Request, db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    b = get_business(db)

    # Update fields if provided in the payload
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(b, field, value)

    db.commit()
    db.refresh(b)

    write_log(
        db,
        user_id=current_user.id,
        action="BUSINESS_UPDATE",
        resource="business",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"fields": sorted(changes)}
    )

    return b
