import enum
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from database import Base


class OfferType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FLAT_AMOUNT = "flat_amount"
    BUY_X_GET_Y = "buy_x_get_y"
    TIME_BASED = "time_based"
    CATEGORY_BASED = "category_based"
    LOYALTY_POINTS = "loyalty_points"


# Promotional offer evaluated against POS carts
class Offer(Base):
    __tablename__ = "offers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    offer_type = Column(String, nullable=False, index=True)
    discount_value = Column(Float, nullable=False, default=0)

    min_purchase_amount = Column(Float, nullable=True)
    max_discount_amount = Column(Float, nullable=True)

    # buy_x_get_y
    buy_quantity = Column(Integer, nullable=True)
    get_quantity = Column(Integer, nullable=True)

    # time_based: "HH:MM" window
    time_start = Column(String, nullable=True)
    time_end = Column(String, nullable=True)

    # Comma separated id lists
    applicable_categories = Column(String, nullable=True)
    applicable_products = Column(String, nullable=True)

    # loyalty_points
    points_threshold = Column(Float, nullable=True)
    points_reward = Column(Float, nullable=True)

    valid_from = Column(DateTime(timezone=True), nullable=True)
    valid_to = Column(DateTime(timezone=True), nullable=True)
    usage_limit = Column(Integer, nullable=True)
    per_customer_limit = Column(Integer, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    priority = Column(Integer, nullable=False, default=999)
    active = Column(Boolean, nullable=False, default=True)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    usages = relationship("OfferUsage", back_populates="offer", cascade="all, delete-orphan")


# One application of an offer to a sale
class OfferUsage(Base):
    __tablename__ = "offer_usage"

    id = Column(Integer, primary_key=True, index=True)
    offer_id = Column(Integer, ForeignKey("offers.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=True, index=True)
    discount_amount = Column(Float, nullable=False, default=0)
    used_at = Column(DateTime(timezone=True), server_default=func.now())

    offer = relationship("Offer", back_populates="usages")
    sale = relationship("Sale", back_populates="offer_usages")
