# utils/inventory.py
from typing import Optional
from sqlalchemy.orm import Session

from models.product import Product
from models.stock import InventoryAdjustment
from utils.pos import InsufficientStockError


def apply_stock_change(
    db: Session,
    product: Product,
    delta: int,
    adjustment_type: str,
    user_id: Optional[int] = None,
    **details,
) -> InventoryAdjustment:
    """
    Changes product stock by `delta` and records the ledger entry.
    Does not commit; callers commit once for the whole operation.
    """
    previous = product.stock_quantity or 0
    new_quantity = previous + delta
    if new_quantity < 0:
        raise InsufficientStockError(
            f"Stock for {product.name} cannot go below zero (available {previous}, change {delta})"
        )

    product.stock_quantity = new_quantity
    entry = InventoryAdjustment(
        product_id=product.id,
        user_id=user_id,
        adjustment_type=adjustment_type,
        quantity=delta,
        previous_quantity=previous,
        new_quantity=new_quantity,
        **details,
    )
    db.add(entry)
    return entry


def lock_product(db: Session, product_id: int) -> Optional[Product]:
    # Row lock on backends that support it; SQLite ignores FOR UPDATE
    return db.query(Product).filter(Product.id == product_id).with_for_update().first()
