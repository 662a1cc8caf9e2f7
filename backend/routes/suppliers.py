# backend/routes/suppliers.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models.supplier import Supplier
from models.purchase import Purchase
from models.users import User
from utils.tokenJWT import get_current_user, manager_or_admin
from utils.audit import write_log, client_ip
import schemas.supplier as supplier_schemas

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


def get_supplier_or_404(db: Session, supplier_id: int) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier


@router.get("", response_model=supplier_schemas.SupplierPage)
def list_suppliers(
    q: Optional[str] = Query(None, description="Name, contact, phone or email"),
    active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Supplier)
    if q:
        like = f"%{q}%"
        query = query.filter(or_(
            Supplier.name.ilike(like), Supplier.contact_person.ilike(like),
            Supplier.phone.ilike(like), Supplier.email.ilike(like),
        ))
    if active is not None:
        query = query.filter(Supplier.active == active)

    total = query.count()
    items = query.order_by(Supplier.name.asc()).offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/{supplier_id}", response_model=supplier_schemas.SupplierOut)
def get_supplier(supplier_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_supplier_or_404(db, supplier_id)


@router.post("", response_model=supplier_schemas.SupplierOut, status_code=status.HTTP_201_CREATED)
def create_supplier(
    payload: supplier_schemas.SupplierCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    supplier = Supplier(**payload.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    write_log(db, user_id=current_user.id, action="SUPPLIER_CREATE", resource="suppliers",
              status="SUCCESS", ip=client_ip(request), meta={"id": supplier.id, "name": supplier.name})
    return supplier


@router.put("/{supplier_id}", response_model=supplier_schemas.SupplierOut)
def update_supplier(
    supplier_id: int,
    payload: supplier_schemas.SupplierUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    supplier = get_supplier_or_404(db, supplier_id)
    changes = payload.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(supplier, key, value)
    db.commit()
    db.refresh(supplier)
    write_log(db, user_id=current_user.id, action="SUPPLIER_UPDATE", resource="suppliers",
              status="SUCCESS", ip=client_ip(request), meta={"id": supplier.id, "fields": sorted(changes)})
    return supplier


@router.delete("/{supplier_id}")
def delete_supplier(
    supplier_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    supplier = get_supplier_or_404(db, supplier_id)
    if db.query(Purchase.id).filter(Purchase.supplier_id == supplier_id).first():
        raise HTTPException(status_code=409, detail="Supplier has purchase orders; deactivate it instead")
    db.delete(supplier)
    db.commit()
    write_log(db, user_id=current_user.id, action="SUPPLIER_DELETE", resource="suppliers",
              status="SUCCESS", ip=client_ip(request), meta={"id": supplier_id})
    return {"message": "Supplier deleted"}
