# backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base


# Product category used for grouping, offers and stock reports
class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    products = relationship("Product", back_populates="category")


# Model Product
# A sellable item. Keeps catalog data, prices (selling / MRP / cost),
# weight for repacking, stock level with its alert threshold and
# the GST classification (HSN code and per-component rates).
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    sku = Column(String, unique=True, nullable=False, index=True)
    description = Column(String)
    barcode = Column(String, index=True)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)

    # Prices, guarded by constraints.
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    mrp = Column(Float, CheckConstraint("mrp >= 0"), nullable=True)
    cost = Column(Float, CheckConstraint("cost >= 0"), nullable=False, default=0)

    # Pack weight; weight_unit is "g" or "kg".
    weight = Column(Float, nullable=True)
    weight_unit = Column(String, nullable=True, default="kg")

    # Stock data.
    stock_quantity = Column(Integer, CheckConstraint("stock_quantity >= 0"), nullable=False, default=0)
    alert_threshold = Column(Integer, nullable=False, default=5)
    location = Column(String)

    # GST classification; rates are decimal strings.
    hsn_code = Column(String, nullable=True, index=True)
    cgst_rate = Column(String, nullable=True, default="0")
    sgst_rate = Column(String, nullable=True, default="0")
    igst_rate = Column(String, nullable=True, default="0")
    cess_rate = Column(String, nullable=True, default="0")

    # Set on items produced by repacking a bulk product.
    bulk_product_id = Column(Integer, ForeignKey("products.id"), nullable=True, index=True)

    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="products")
    bulk_product = relationship("Product", remote_side=[id])

    @property
    def category_name(self):
        return self.category.name if self.category else None

    @property
    def is_low_stock(self) -> bool:
        return (self.stock_quantity or 0) <= (self.alert_threshold or 0)
