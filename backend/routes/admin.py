# backend/routes/admin.py
from fastapi import APIRouter, Depends, HTTPException, status, Query, Request
from sqlalchemy.orm import Session
from typing import Optional, Literal
from database import get_db
from models.users import User
from models.sale import Sale
from models.cart import Cart
from models.purchase import Purchase
from utils.tokenJWT import admin_only
from utils.audit import write_log, client_ip
from schemas.user import RoleUpdate, StatusUpdate, UserResponse, UsersPage

router = APIRouter(prefix="/users", tags=["Admin"])


# Retrieve a list of users with filtering, sorting, and pagination (Admin only)
@router.get("", response_model=UsersPage)
def get_all_users(
    q: Optional[str] = Query(None, description="Search by email or name"),
    role: Optional[str] = Query(None, description="Filter by role"),
    active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "email", "role", "name", "created_at"] = "id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    query = db.query(User)

    # Filter by email or name
    if q:
        like = f"%{q.lower()}%"
        query = query.filter(User.email.ilike(like) | User.name.ilike(like))

    # Filter by role
    if role:
        query = query.filter(User.role.ilike(role))

    if active is not None:
        query = query.filter(User.active == active)

    # Apply sorting based on selected field and order
    sort_map = {
        "id": User.id,
        "email": User.email,
        "role": User.role,
        "name": User.name,
        "created_at": User.created_at,
    }
    col = sort_map.get(sort_by, User.id)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    # Apply pagination
    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": users,
        "total": total,
        "page": page,
        "page_size": page_size,
    }


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# Update user role (Admin only)
@router.put("/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: int,
    new_role: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    user = _get_user(db, user_id)
    if user.id == current_user.id and new_role.role != "admin":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot remove your own admin role")

    old_role = user.role
    user.role = new_role.role
    db.commit()
    db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_ROLE", resource="users", status="SUCCESS",
              ip=client_ip(request), meta={"user_id": user.id, "from": old_role, "to": user.role})
    return user


# Activate / deactivate a user account (Admin only)
@router.put("/{user_id}/status", response_model=UserResponse)
def update_user_status(
    user_id: int,
    payload: StatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    user = _get_user(db, user_id)
    if user.id == current_user.id and not payload.active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account")

    user.active = payload.active
    db.commit()
    db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_STATUS", resource="users", status="SUCCESS",
              ip=client_ip(request), meta={"user_id": user.id, "active": user.active})
    return user


# Delete a user account (Admin only)
@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    user = _get_user(db, user_id)

    # Prevent self-deletion
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    # Sales keep their cashier; such accounts can only be deactivated
    if db.query(Sale.id).filter(Sale.user_id == user.id).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User has recorded sales; deactivate the account instead")
    if db.query(Purchase.id).filter(Purchase.user_id == user.id).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User has recorded purchases; deactivate the account instead")

    for cart in db.query(Cart).filter(Cart.user_id == user.id).all():
        db.delete(cart)

    email = user.email
    db.delete(user)
    db.commit()

    write_log(db, user_id=current_user.id, action="USER_DELETE", resource="users", status="SUCCESS",
              ip=client_ip(request), meta={"email": email})
    return {"message": f"User {email} has been deleted"}
