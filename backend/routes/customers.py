# backend/routes/customers.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from database import get_db
from models.customer import Customer
from models.sale import Sale
from models.users import User
from utils.tokenJWT import get_current_user, manager_or_admin
from utils.audit import write_log, client_ip
import schemas.customer as customer_schemas
from schemas.sale import SalePage
from routes.sales import sale_to_out

router = APIRouter(prefix="/customers", tags=["Customers"])


def get_customer_or_404(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


def _check_duplicates(db: Session, data: dict, customer_id: Optional[int] = None) -> None:
    for field in ("phone", "email"):
        value = data.get(field)
        if not value:
            continue
        q = db.query(Customer.id).filter(func.lower(getattr(Customer, field)) == str(value).lower())
        if customer_id is not None:
            q = q.filter(Customer.id != customer_id)
        if q.first():
            raise HTTPException(status_code=409, detail=f"A customer with this {field} already exists")


@router.get("", response_model=customer_schemas.CustomerPage)
def list_customers(
    q: Optional[str] = Query(None),
    active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Customer)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Customer.name.ilike(like), Customer.phone.ilike(like), Customer.email.ilike(like)))
    if active is not None:
        query = query.filter(Customer.active == active)
    total = query.count()
    items = query.order_by(Customer.name.asc()).offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


# Quick lookup at the till
@router.get("/search", response_model=List[customer_schemas.CustomerOut])
def search_customers(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    like = f"%{q.strip()}%"
    return (
        db.query(Customer)
        .filter(Customer.active.is_(True))
        .filter(or_(Customer.name.ilike(like), Customer.phone.ilike(like), Customer.email.ilike(like)))
        .order_by(Customer.name.asc())
        .limit(20)
        .all()
    )


@router.get("/{customer_id}", response_model=customer_schemas.CustomerOut)
def get_customer(customer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_customer_or_404(db, customer_id)


@router.post("", response_model=customer_schemas.CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: customer_schemas.CustomerCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    data = payload.model_dump()
    _check_duplicates(db, data)
    customer = Customer(**data)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    write_log(db, user_id=current_user.id, action="CUSTOMER_CREATE", resource="customers",
              status="SUCCESS", ip=client_ip(request), meta={"id": customer.id})
    return customer


@router.put("/{customer_id}", response_model=customer_schemas.CustomerOut)
def update_customer(
    customer_id: int,
    payload: customer_schemas.CustomerUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    customer = get_customer_or_404(db, customer_id)
    changes = payload.model_dump(exclude_unset=True)
    # Loyalty balance changes go through redeem / sales
    if "loyalty_points" in changes and (current_user.role or "").lower() not in {"admin", "manager"}:
        raise HTTPException(status_code=403, detail="Only managers can set loyalty points")
    _check_duplicates(db, changes, customer_id)
    for key, value in changes.items():
        setattr(customer, key, value)
    db.commit()
    db.refresh(customer)
    write_log(db, user_id=current_user.id, action="CUSTOMER_UPDATE", resource="customers",
              status="SUCCESS", ip=client_ip(request), meta={"id": customer.id, "fields": sorted(changes)})
    return customer


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    customer = get_customer_or_404(db, customer_id)
    if db.query(Sale.id).filter(Sale.customer_id == customer_id).first():
        raise HTTPException(status_code=409, detail="Customer has purchase history; deactivate instead")
    db.delete(customer)
    db.commit()
    write_log(db, user_id=current_user.id, action="CUSTOMER_DELETE", resource="customers",
              status="SUCCESS", ip=client_ip(request), meta={"id": customer_id})
    return {"message": "Customer deleted"}


@router.post("/{customer_id}/loyalty/redeem", response_model=customer_schemas.CustomerOut)
def redeem_points(
    customer_id: int,
    payload: customer_schemas.LoyaltyRedeem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    customer = get_customer_or_404(db, customer_id)
    if payload.points > (customer.loyalty_points or 0):
        raise HTTPException(
            status_code=400,
            detail=f"Insufficient loyalty points (available {customer.loyalty_points or 0})",
        )
    customer.loyalty_points = (customer.loyalty_points or 0) - payload.points
    db.commit()
    db.refresh(customer)
    write_log(db, user_id=current_user.id, action="LOYALTY_REDEEM", resource="customers",
              status="SUCCESS", ip=client_ip(request),
              meta={"id": customer.id, "points": payload.points, "reason": payload.reason})
    return customer


# Purchase history
@router.get("/{customer_id}/sales", response_model=SalePage)
def customer_sales(
    customer_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_customer_or_404(db, customer_id)
    query = db.query(Sale).filter(Sale.customer_id == customer_id).order_by(Sale.created_at.desc(), Sale.id.desc())
    total = query.count()
    sales = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": [sale_to_out(s) for s in sales], "total": total, "page": page, "page_size": page_size}
