import enum
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from database import Base


class AdjustmentType(str, enum.Enum):
    ADD = "add"
    REMOVE = "remove"
    CORRECTION = "correction"
    TRANSFER = "transfer"
    SALE = "sale"
    RETURN = "return"
    PURCHASE = "purchase"
    REPACK = "repack"


# Stock ledger entry: every change of Product.stock_quantity leaves one
class InventoryAdjustment(Base):
    __tablename__ = "inventory_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    adjustment_type = Column(String, nullable=False, index=True)
    # Signed change applied to stock (0 for transfers)
    quantity = Column(Integer, nullable=False)
    previous_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)

    reason = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    unit_cost = Column(Float, nullable=True)
    batch_number = Column(String, nullable=True)
    location_from = Column(String, nullable=True)
    location_to = Column(String, nullable=True)
    reference_document = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    product = relationship("Product")
    user = relationship("User")
