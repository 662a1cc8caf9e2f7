# backend/routes/products.py
from typing import Optional, List
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user, manager_or_admin
from utils.audit import write_log, client_ip
from models.users import User
from models.product import Product, Category
from models.tax import HsnCode
from models.sale import SaleItem
from models.stock import AdjustmentType, InventoryAdjustment
from models.purchase import PurchaseItem
from models.cart import CartItem
from utils.inventory import apply_stock_change
import schemas.product as product_schemas

router = APIRouter(tags=["Products"])

RATE_FIELDS = ("cgst_rate", "sgst_rate", "igst_rate", "cess_rate")


# ---- HELPERS ----
def get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _check_refs(db: Session, data: dict, product_id: Optional[int] = None) -> None:
    if data.get("category_id") is not None:
        if not db.query(Category.id).filter(Category.id == data["category_id"]).first():
            raise HTTPException(status_code=404, detail="Category not found")
    if data.get("bulk_product_id") is not None:
        if data["bulk_product_id"] == product_id:
            raise HTTPException(status_code=400, detail="A product cannot be its own bulk product")
        if not db.query(Product.id).filter(Product.id == data["bulk_product_id"]).first():
            raise HTTPException(status_code=404, detail="Bulk product not found")
    if data.get("sku"):
        q = db.query(Product.id).filter(Product.sku == data["sku"])
        if product_id is not None:
            q = q.filter(Product.id != product_id)
        if q.first():
            raise HTTPException(status_code=409, detail="Product SKU already exists")


def _fill_rates_from_hsn(db: Session, data: dict) -> None:
    """Copies GST rates from the HSN master for every rate the caller left empty."""
    code = (data.get("hsn_code") or "").strip()
    if not code:
        return
    hsn = db.query(HsnCode).filter(HsnCode.hsn_code == code).first()
    if not hsn:
        return
    for field in RATE_FIELDS:
        if data.get(field) is None:
            data[field] = getattr(hsn, field)


# =========================
# PRODUCT LIST
# =========================
@router.get("/products", response_model=product_schemas.ProductListPage)
def list_products(
    q: Optional[str] = Query(None, description="Name, SKU or barcode"),
    category_id: Optional[int] = Query(None),
    active: Optional[bool] = Query(None),
    low_stock: bool = Query(False),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=500),
    sort_by: str = Query("id"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Product)

    if q:
        like = f"%{q}%"
        query = query.filter(or_(Product.name.ilike(like), Product.sku.ilike(like), Product.barcode.ilike(like)))
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if active is not None:
        query = query.filter(Product.active == active)
    if low_stock:
        query = query.filter(Product.stock_quantity <= Product.alert_threshold)

    allowed = {
        "id": Product.id, "sku": Product.sku, "name": Product.name,
        "price": Product.price, "stock_quantity": Product.stock_quantity,
        "created_at": Product.created_at,
    }
    sort_col = allowed.get(sort_by.lower(), Product.id)
    query = query.order_by(sort_col.asc() if order == "asc" else sort_col.desc())

    total = query.count()
    items: List[Product] = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"items": items, "total": total, "page": page, "page_size": page_size}


# Quick POS lookup
@router.get("/products/search", response_model=List[product_schemas.ProductOut])
def search_products(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    like = f"%{q.strip()}%"
    return (
        db.query(Product)
        .filter(Product.active.is_(True))
        .filter(or_(Product.name.ilike(like), Product.sku.ilike(like), Product.barcode.ilike(like)))
        .order_by(Product.name.asc())
        .limit(20)
        .all()
    )


# Exact barcode / SKU match used by scanners
@router.get("/products/barcode/{code}", response_model=product_schemas.ProductOut)
def get_by_barcode(code: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    code = code.strip()
    product = db.query(Product).filter(Product.barcode == code).first()
    if not product:
        product = db.query(Product).filter(Product.sku == code.upper()).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("/products/low-stock", response_model=List[product_schemas.ProductOut])
def low_stock_products(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return (
        db.query(Product)
        .filter(Product.active.is_(True), Product.stock_quantity <= Product.alert_threshold)
        .order_by(Product.stock_quantity.asc(), Product.name.asc())
        .limit(limit)
        .all()
    )


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/products/{product_id}", response_model=product_schemas.ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return get_product_or_404(db, product_id)


@router.post("/products", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def add_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    data = payload.model_dump()
    _check_refs(db, data)
    _fill_rates_from_hsn(db, data)
    for field in RATE_FIELDS:
        if data.get(field) is None:
            data[field] = "0"

    opening_stock = data.pop("stock_quantity", 0) or 0
    new_product = Product(**data, stock_quantity=0)
    db.add(new_product)
    db.flush()
    if opening_stock:
        apply_stock_change(db, new_product, opening_stock, AdjustmentType.ADD.value,
                           user_id=current_user.id, reason="Opening stock", unit_cost=new_product.cost)
    db.commit()
    db.refresh(new_product)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": new_product.id, "sku": new_product.sku}
    )
    return new_product


def _update(db: Session, product: Product, changes: dict, user_id: int) -> Product:
    _check_refs(db, changes, product_id=product.id)
    new_stock = changes.pop("stock_quantity", None)
    if new_stock is not None and new_stock != product.stock_quantity:
        apply_stock_change(db, product, new_stock - (product.stock_quantity or 0), AdjustmentType.CORRECTION.value,
                           user_id=user_id, reason="Product edit")
    if changes.get("hsn_code") and changes["hsn_code"] != product.hsn_code:
        _fill_rates_from_hsn(db, changes)
    for key, value in changes.items():
        if key in RATE_FIELDS and value is None:
            continue
        setattr(product, key, value)
    db.commit()
    db.refresh(product)
    return product


# Full update
@router.put("/products/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    product = get_product_or_404(db, product_id)
    product = _update(db, product, payload.model_dump(), current_user.id)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id}
    )
    return product


# Partial update
@router.patch("/products/{product_id}", response_model=product_schemas.ProductOut)
def edit_product(
    product_id: int,
    payload: product_schemas.ProductEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    product = get_product_or_404(db, product_id)
    changes = payload.model_dump(exclude_unset=True)
    product = _update(db, product, dict(changes), current_user.id)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_EDIT", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "fields": sorted(changes)}
    )
    return product


@router.delete("/products/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    product = get_product_or_404(db, product_id)

    # Products with sale history stay for receipts and reports
    if db.query(SaleItem.id).filter(SaleItem.product_id == product.id).first():
        raise HTTPException(status_code=409, detail="Product has sales history; deactivate it instead")
    if db.query(Product.id).filter(Product.bulk_product_id == product.id).first():
        raise HTTPException(status_code=409, detail="Product has repacked items")
    if db.query(PurchaseItem.id).filter(PurchaseItem.product_id == product.id).first():
        raise HTTPException(status_code=409, detail="Product is on purchase orders; deactivate it instead")

    # Ledger and held-cart rows go with the product
    db.query(InventoryAdjustment).filter(InventoryAdjustment.product_id == product.id).delete()
    db.query(CartItem).filter(CartItem.product_id == product.id).delete()

    pid, sku = product.id, product.sku
    db.delete(product)
    db.commit()

    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              status="SUCCESS", ip=client_ip(request), meta={"id": pid, "sku": sku})
    return {"message": f"Product {sku} deleted"}


# =========================
# CATEGORIES
# =========================
def _category_out(db: Session, category: Category) -> dict:
    count = db.query(func.count(Product.id)).filter(Product.category_id == category.id).scalar() or 0
    return {"id": category.id, "name": category.name, "description": category.description, "product_count": count}


@router.get("/categories", response_model=List[product_schemas.CategoryOut])
def list_categories(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return [_category_out(db, c) for c in db.query(Category).order_by(Category.name.asc()).all()]


@router.post("/categories", response_model=product_schemas.CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: product_schemas.CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    name = payload.name.strip()
    if db.query(Category.id).filter(func.lower(Category.name) == name.lower()).first():
        raise HTTPException(status_code=409, detail="Category already exists")
    category = Category(name=name, description=payload.description)
    db.add(category)
    db.commit()
    db.refresh(category)
    write_log(db, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id, "name": name})
    return _category_out(db, category)


@router.put("/categories/{category_id}", response_model=product_schemas.CategoryOut)
def update_category(
    category_id: int,
    payload: product_schemas.CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    if payload.name is not None:
        name = payload.name.strip()
        clash = db.query(Category.id).filter(func.lower(Category.name) == name.lower(), Category.id != category_id).first()
        if clash:
            raise HTTPException(status_code=409, detail="Category already exists")
        category.name = name
    if payload.description is not None:
        category.description = payload.description
    db.commit()
    db.refresh(category)
    write_log(db, user_id=current_user.id, action="CATEGORY_UPDATE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id})
    return _category_out(db, category)


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(manager_or_admin),
):
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    if db.query(Product.id).filter(Product.category_id == category_id).first():
        raise HTTPException(status_code=409, detail="Category still has products")
    db.delete(category)
    db.commit()
    write_log(db, user_id=current_user.id, action="CATEGORY_DELETE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category_id})
    return {"message": "Category deleted"}
