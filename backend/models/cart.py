# backend/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Float, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Held POS cart of a cashier
class Cart(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False) # Cashier owning the cart
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    status = Column(String, default="open", index=True)  # open / checked_out / cleared
    created_at = Column(DateTime, server_default=func.now())

    items = relationship("CartItem", back_populates="cart", cascade="all, delete-orphan", order_by="CartItem.id")


# Single product line within a held cart
class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(Integer, ForeignKey("carts.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price_snapshot = Column(Float, nullable=False) # Price at the moment of scanning

    cart = relationship("Cart", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        # A product appears once per cart; re-adding bumps the quantity
        UniqueConstraint("cart_id", "product_id", name="uq_cartitem_cart_product"),
    )
